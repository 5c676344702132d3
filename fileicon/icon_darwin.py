"""
macOS/Darwin implementations of the icon capabilities.

- DarwinFilesystem: filesystem access and extended attributes
  (com.apple.FinderInfo, com.apple.ResourceFork) through the xattr package.
- CocoaIconGenerator: icon family rendering through NSWorkspace (PyObjC).

For other platforms, see memory.py for a portable implementation with the
same interface.
"""

import errno
import os
from typing import Optional

import xattr

from .errors import NotFoundError, PermissionDeniedError, wrap_os_error

# 'Attribute not found' is ENOATTR on macOS and ENODATA on Linux
_ENOATTR = getattr(errno, "ENOATTR", errno.ENODATA)


class DarwinFilesystem:
    """FilesystemBackend backed by the real filesystem."""

    def __init__(self, debug: bool = False):
        self._debug = debug

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def can_read(self, path: str) -> bool:
        return os.access(path, os.R_OK)

    def can_write(self, path: str) -> bool:
        return os.access(path, os.W_OK)

    def _check(self, path: str, operation: str, write: bool = False):
        if not self.exists(path):
            raise NotFoundError(f"Cannot {operation} '{path}': no such file or folder")
        if not (self.can_write(path) if write else self.can_read(path)):
            raise PermissionDeniedError(f"Cannot {operation} '{path}': permission denied")

    def get_xattr(self, path: str, name: str) -> Optional[bytes]:
        self._check(path, f"read {name} of")
        try:
            value = xattr.getxattr(path, name)
        except OSError as e:
            if e.errno == _ENOATTR:
                return None
            raise wrap_os_error(e, "read", path, name) from e
        if self._debug:
            print(f"[fileicon] getxattr {name} {path!r}: {len(value)} bytes", flush=True)
        return value

    def set_xattr(self, path: str, name: str, value: bytes) -> None:
        self._check(path, f"write {name} of", write=True)
        if self._debug:
            print(f"[fileicon] setxattr {name} {path!r}: {len(value)} bytes", flush=True)
        try:
            xattr.setxattr(path, name, value)
        except OSError as e:
            raise wrap_os_error(e, "write", path, name) from e

    def remove_xattr(self, path: str, name: str) -> bool:
        self._check(path, f"remove {name} of", write=True)
        try:
            xattr.removexattr(path, name)
        except OSError as e:
            if e.errno == _ENOATTR:
                return False
            raise wrap_os_error(e, "remove", path, name) from e
        if self._debug:
            print(f"[fileicon] removexattr {name} {path!r}", flush=True)
        return True

    def read_file(self, path: str) -> bytes:
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise wrap_os_error(e, "read", path) from e

    def write_file(self, path: str, data: bytes) -> None:
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise wrap_os_error(e, "write", path) from e

    def remove_file(self, path: str) -> bool:
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise wrap_os_error(e, "remove", path) from e
        if self._debug:
            print(f"[fileicon] removed {path!r}", flush=True)
        return True


class CocoaIconGenerator:
    """IconGenerator that asks NSWorkspace to render and attach the icon.

    NSWorkspace writes the icns resource into the target's resource fork
    (or into Icon\\r for a folder) and sets the custom icon flag.
    """

    def __init__(self, debug: bool = False):
        self._debug = debug

    def set_icon(self, image_path: str, target_path: str) -> bool:
        import Cocoa  # only available on macOS

        # A nil image is passed through: NSWorkspace then removes the
        # existing custom icon instead of keeping it.
        image = Cocoa.NSImage.alloc().initWithContentsOfFile_(image_path)
        if image is None and self._debug:
            print(f"[fileicon] NSImage could not load {image_path!r}", flush=True)

        ok = Cocoa.NSWorkspace.sharedWorkspace().setIcon_forFile_options_(image, target_path, 0)
        if self._debug:
            print(f"[fileicon] NSWorkspace.setIcon {target_path!r} -> {bool(ok)}", flush=True)
        return bool(ok)
