"""Models for the gallery synchronization application."""

from .models import (
    DEFAULT_ENABLED_EXTENSIONS,
    GallerySettings,
    MimeType,
    MimeTypeCategory,
)

__all__ = [
    "DEFAULT_ENABLED_EXTENSIONS",
    "GallerySettings",
    "MimeType",
    "MimeTypeCategory",
]
