"""Core business logic for gallery synchronization.

This package contains:
- media: collaborators for files, identity keys and derived artifacts
- sync: the album/media object synchronization engine
"""

__all__: list[str] = []
