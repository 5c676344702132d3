"""
Capability interfaces the icon code needs from its host.

The codec, metadata and resource-fork logic only ever talk to these two
protocols, so they run unchanged against the real macOS filesystem
(icon_darwin.py) or an in-memory one (memory.py).
"""

from typing import Optional, Protocol


# Extended attribute names used for custom icons
FINDER_INFO_NAME = "com.apple.FinderInfo"
RESOURCE_FORK_NAME = "com.apple.ResourceFork"


class FilesystemBackend(Protocol):
    """Minimal filesystem + extended attribute interface.

    Methods raise FileIconError subclasses (NotFoundError,
    PermissionDeniedError) rather than bare OSErrors.
    """

    def is_file(self, path: str) -> bool:
        ...

    def is_dir(self, path: str) -> bool:
        ...

    def exists(self, path: str) -> bool:
        ...

    def can_read(self, path: str) -> bool:
        ...

    def can_write(self, path: str) -> bool:
        ...

    def get_xattr(self, path: str, name: str) -> Optional[bytes]:
        """Return the attribute value, or None if the attribute is absent."""
        ...

    def set_xattr(self, path: str, name: str, value: bytes) -> None:
        ...

    def remove_xattr(self, path: str, name: str) -> bool:
        """Remove an attribute. Returns False if it was already absent."""
        ...

    def read_file(self, path: str) -> bytes:
        ...

    def write_file(self, path: str, data: bytes) -> None:
        ...

    def remove_file(self, path: str) -> bool:
        """Remove a file. Returns False if it was already absent."""
        ...


class IconGenerator(Protocol):
    """Host service that renders an image into an icon family for a target.

    The return value is advisory only: the real service reports success for
    images it could not render, so callers check the resulting fork.
    """

    def set_icon(self, image_path: str, target_path: str) -> bool:
        ...
