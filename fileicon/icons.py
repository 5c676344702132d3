"""
Custom icon operations for files and folders.

IconManager ties the FinderInfo flag (finder_info.py) and the icns resource
(resource_fork.py) together into the four operations: assign, extract,
remove and test. Rendering an image into an icon family is left to the host's
IconGenerator; its success report is not trusted, the resulting resource
fork is checked instead.

Operations are synchronous and keep no state between calls. Two concurrent
assign/remove calls against the same entry are not coordinated.
"""

import enum
import io
import os
import sys
from typing import List, Optional

from .backend import RESOURCE_FORK_NAME, FilesystemBackend, IconGenerator
from .errors import (
    AlreadyExistsError,
    CorruptResourceError,
    FileIconError,
    InvalidImageError,
    NoIconPresentError,
    NotFoundError,
    PermissionDeniedError,
)
from .finder_info import clear_custom_icon_flag, has_custom_icon_flag, set_custom_icon_flag
from .resource_fork import (
    extract_icon_container,
    has_icon_container,
    load_resource_fork,
    locate_icon_container,
    resolve_fork_path,
)
from .platform import get_backend, get_icon_generator

SUPPORTED_IMAGE_FORMATS = (
    "jpeg", "tiff", "png", "gif", "jp2", "pict", "bmp", "qtif", "psd", "sgi", "tga",
)

ICNS_SUFFIX = ".icns"
STDOUT = "-"


class IconState(enum.Enum):
    """Outcome of IconManager.test, with the matching process exit code."""

    HAS_ICON = "has-icon"
    NO_ICON = "no-icon"
    ERROR = "error"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]


_EXIT_CODES = {
    IconState.HAS_ICON: 0,
    IconState.NO_ICON: 1,
    IconState.ERROR: 3,
}


class IconManager:
    """Assign, extract, remove and test custom icons."""

    def __init__(self, backend: Optional[FilesystemBackend] = None,
                 generator: Optional[IconGenerator] = None, debug: bool = False):
        self.backend = backend if backend is not None else get_backend(debug=debug)
        self.generator = generator if generator is not None else get_icon_generator(self.backend, debug=debug)
        self._debug = debug

    def _check_entry(self, entry: str, write: bool = False) -> None:
        if not (self.backend.is_file(entry) or self.backend.is_dir(entry)):
            raise NotFoundError(f"Target not found or neither file nor folder: '{entry}'")
        if not self.backend.can_read(entry):
            raise PermissionDeniedError(f"Cannot access '{entry}': you do not have read permissions.")
        if write and not self.backend.can_write(entry):
            raise PermissionDeniedError(f"Cannot modify '{entry}': you do not have write permissions.")

    def assign(self, entry: str, image: Optional[str] = None) -> None:
        """Assign a custom icon rendered from image to entry.

        Args:
            entry: File or folder to receive the icon.
            image: Source image; defaults to entry itself (an image file
                   becomes its own icon).

        Raises:
            NotFoundError: entry or image missing.
            PermissionDeniedError: entry not read/writable or image unreadable.
            InvalidImageError: no icon container was produced.
        """
        self._check_entry(entry, write=True)
        if image is None:
            image = entry
        if not self.backend.is_file(image):
            raise NotFoundError(f"Image file not found or not a regular file: {image}")
        if not self.backend.can_read(image):
            raise PermissionDeniedError(f"Image file is not readable: {image}")

        # Drop any previous icon so the check below only sees what this
        # call produced
        self.remove(entry)

        reported = self.generator.set_icon(image, entry)
        if self._debug:
            print(f"[fileicon] generator reported {'success' if reported else 'failure'} "
                  f"for {entry!r}", flush=True)

        try:
            fork = load_resource_fork(self.backend, entry)
        except NoIconPresentError:
            fork = b""
        if not has_icon_container(fork):
            raise InvalidImageError(image, SUPPORTED_IMAGE_FORMATS)

        set_custom_icon_flag(self.backend, entry)

    def default_destination(self, entry: str) -> str:
        """Name of the icns file extract() writes to when given none."""
        return os.path.basename(entry.rstrip("/")) + ICNS_SUFFIX

    def extract(self, entry: str, destination: Optional[str] = None, force: bool = False) -> str:
        """Copy entry's icns container to destination.

        Args:
            entry: File or folder with a custom icon.
            destination: Output path; '.icns' is appended if missing, '-'
                         writes to standard output. Defaults to the entry's
                         name plus '.icns' in the current directory.
            force: Replace an existing destination.

        Returns:
            The path written (or '-').

        Raises:
            AlreadyExistsError: destination exists and force is False.
            NoIconPresentError: entry has no icon container.
            CorruptResourceError: icon container header is implausible.
        """
        self._check_entry(entry)

        if destination != STDOUT:
            if not destination:
                destination = self.default_destination(entry)
            elif not destination.lower().endswith(ICNS_SUFFIX):
                destination += ICNS_SUFFIX
            if self.backend.exists(destination) and not force:
                raise AlreadyExistsError(
                    f"Output file '{destination}' already exists. To force its replacement, use force."
                )

        fork = load_resource_fork(self.backend, entry)
        if destination == STDOUT:
            extract_icon_container(fork, sys.stdout.buffer)
            sys.stdout.buffer.flush()
            return destination

        buf = io.BytesIO()
        count = extract_icon_container(fork, buf)
        self.backend.write_file(destination, buf.getvalue())
        if self._debug:
            print(f"[fileicon] extracted {count} bytes to {destination!r}", flush=True)
        return destination

    def remove(self, entry: str) -> None:
        """Remove entry's custom icon. A no-op if it has none.

        The flag is cleared first and the icon resource deleted second; both
        are attempted, and the first error is raised afterwards.
        """
        self._check_entry(entry, write=True)
        errors: List[FileIconError] = []

        try:
            clear_custom_icon_flag(self.backend, entry)
        except FileIconError as e:
            errors.append(e)

        try:
            fork_path = resolve_fork_path(self.backend, entry)
            if fork_path != entry:
                self.backend.remove_file(fork_path)
            else:
                fork = self.backend.get_xattr(entry, RESOURCE_FORK_NAME)
                # Forks without an icon hold someone else's resources
                if fork and has_icon_container(fork):
                    self.backend.remove_xattr(entry, RESOURCE_FORK_NAME)
        except FileIconError as e:
            errors.append(e)

        if errors:
            raise errors[0]

    def test(self, entry: str) -> IconState:
        """Report whether entry has a custom icon.

        HAS_ICON requires both the FinderInfo flag and a well-formed icon
        container in the resource fork, i.e. one extract() can copy out.
        Access problems give ERROR instead of raising.
        """
        try:
            self._check_entry(entry)
            if not has_custom_icon_flag(self.backend, entry):
                return IconState.NO_ICON
            locate_icon_container(load_resource_fork(self.backend, entry))
        except (NoIconPresentError, CorruptResourceError):
            return IconState.NO_ICON
        except FileIconError as e:
            if self._debug:
                print(f"[fileicon] test {entry!r}: {e}", flush=True)
            return IconState.ERROR

        return IconState.HAS_ICON
