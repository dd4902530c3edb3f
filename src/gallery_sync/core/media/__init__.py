"""Media collaborators of the synchronization engine.

Handles MIME lookup, identity hash keys, path mapping, media object creation,
derived file generation and metadata extraction.
"""

from .derivatives import DerivativeGenerator
from .factory import MediaObjectFactory, default_dimensions
from .hash_keys import HashKeyRegistry, compute_hash_key, hash_key_for_file
from .image_info import file_size_kb, needs_optimized_image, read_image_size
from .metadata import MetadataExtractor
from .mime_types import MimeTypeRegistry
from .paths import GalleryPaths

__all__ = [
    # Identity
    "HashKeyRegistry",
    "compute_hash_key",
    "hash_key_for_file",
    # Files and paths
    "GalleryPaths",
    "MimeTypeRegistry",
    "file_size_kb",
    "read_image_size",
    "needs_optimized_image",
    # Creation and derivatives
    "MediaObjectFactory",
    "default_dimensions",
    "DerivativeGenerator",
    "MetadataExtractor",
]
