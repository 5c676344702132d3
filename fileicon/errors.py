"""
Exception hierarchy for fileicon.

Every error raised by the package derives from FileIconError so callers can
catch the whole family at once. Low-level OSErrors coming out of a backend are
translated into NotFoundError / PermissionDeniedError with the operation and
path attached.
"""

from typing import Iterable, Optional


class FileIconError(Exception):
    """Base class for all fileicon errors."""


class NotFoundError(FileIconError):
    """Target entry or source image does not exist."""


class PermissionDeniedError(FileIconError):
    """Read or write access to an entry is lacking."""


class InvalidImageError(FileIconError):
    """The icon generator produced no icon container for an image."""

    def __init__(self, image: str, supported: Iterable[str]):
        self.image = image
        self.supported = tuple(supported)
        super().__init__(
            "Failed to create resource fork with icons. Typically, this means "
            f"that the specified image file is not supported or corrupt: {image}\n"
            f"Supported image formats: {' | '.join(self.supported)}"
        )


class CorruptResourceError(FileIconError):
    """Icon magic found, but the location it decodes to is implausible."""


class AlreadyExistsError(FileIconError):
    """Extraction destination exists and force was not given."""


class NoIconPresentError(FileIconError):
    """The entry carries no custom icon."""


class IconContainerNotFoundError(NoIconPresentError):
    """The resource fork holds no icns container."""


class ByteStringError(FileIconError, ValueError):
    """Invalid index or byte value for a byte-string patch."""


def wrap_os_error(err: OSError, operation: str, path: str,
                  name: Optional[str] = None) -> FileIconError:
    """Translate an OSError from a backend into a FileIconError.

    Args:
        err: The original error.
        operation: Short verb for the message ("read", "write", ...).
        path: The entry the operation targeted.
        name: Attribute name, if the operation was on an extended attribute.

    Returns:
        The translated exception (not raised).
    """
    what = f"{operation} {name} of" if name else operation
    if isinstance(err, FileNotFoundError):
        return NotFoundError(f"Cannot {what} '{path}': no such file or folder")
    if isinstance(err, PermissionError):
        return PermissionDeniedError(f"Cannot {what} '{path}': permission denied")
    return FileIconError(f"Cannot {what} '{path}': {err.strerror or err}")
