"""Gallery synchronization tool.

Keeps a gallery's albums and media objects in a SQLite data store in line with
the directory tree holding the media files, and maintains their thumbnails,
optimized images and extracted metadata.
"""

__version__ = "1.0.0"
__author__ = "Anton"
__email__ = ""

from .config import Config
from .models import GallerySettings

__all__ = [
    "Config",
    "GallerySettings",
]
