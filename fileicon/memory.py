"""
In-memory implementations of the icon capabilities.

MemoryFilesystem keeps files, folders and their extended attributes in a
dict, so the FinderInfo and resource fork logic can run on any platform.
MemoryIconGenerator stands in for NSWorkspace, including its habit of
reporting success for images it could not render.
"""

import posixpath
import struct
from dataclasses import dataclass, field
from typing import Dict, Optional

from .backend import RESOURCE_FORK_NAME, FINDER_INFO_NAME
from .errors import NotFoundError, PermissionDeniedError
from .finder_info import ICON_FILE_FINDER_INFO, clear_custom_icon_flag, set_custom_icon_flag
from .resource_fork import ICNS_MAGIC, ICNS_HEADER_SIZE, build_resource_fork, resolve_fork_path

# Leading bytes of the image formats the generator accepts
IMAGE_SIGNATURES = (
    b"\x89PNG\r\n\x1a\n",  # png
    b"\xff\xd8\xff",       # jpeg
    b"GIF87a",
    b"GIF89a",
    b"II*\x00",            # tiff, little-endian
    b"MM\x00*",            # tiff, big-endian
    b"BM",                 # bmp
    b"\x00\x00\x00\x0cjP  \r\n\x87\n",  # jp2
    b"8BPS",               # psd
    b"\x01\xda",           # sgi
)

# icns element type for a 512x512 PNG/JPEG 2000 rendering
ICNS_ELEMENT_512 = b"ic09"


@dataclass
class _Node:
    is_dir: bool
    data: bytes = b""
    xattrs: Dict[str, bytes] = field(default_factory=dict)
    readable: bool = True
    writable: bool = True


def _norm(path: str) -> str:
    return posixpath.normpath(path)


class MemoryFilesystem:
    """FilesystemBackend that lives entirely in memory."""

    def __init__(self, debug: bool = False):
        self._nodes: Dict[str, _Node] = {}
        self._debug = debug

    # Setup helpers

    def add_file(self, path: str, data: bytes = b"", readable: bool = True,
                 writable: bool = True) -> str:
        self._nodes[_norm(path)] = _Node(False, data, readable=readable, writable=writable)
        return path

    def add_dir(self, path: str, readable: bool = True, writable: bool = True) -> str:
        self._nodes[_norm(path)] = _Node(True, readable=readable, writable=writable)
        return path

    def set_permissions(self, path: str, readable: bool = True, writable: bool = True):
        node = self._node(path, "change permissions of")
        node.readable = readable
        node.writable = writable

    def xattrs(self, path: str) -> Dict[str, bytes]:
        """Return a copy of all extended attributes of path."""
        return dict(self._node(path, "list attributes of").xattrs)

    # FilesystemBackend

    def _node(self, path: str, operation: str, write: bool = False) -> _Node:
        node = self._nodes.get(_norm(path))
        if node is None:
            raise NotFoundError(f"Cannot {operation} '{path}': no such file or folder")
        if not (node.writable if write else node.readable):
            raise PermissionDeniedError(f"Cannot {operation} '{path}': permission denied")
        return node

    def is_file(self, path: str) -> bool:
        node = self._nodes.get(_norm(path))
        return node is not None and not node.is_dir

    def is_dir(self, path: str) -> bool:
        node = self._nodes.get(_norm(path))
        return node is not None and node.is_dir

    def exists(self, path: str) -> bool:
        return _norm(path) in self._nodes

    def can_read(self, path: str) -> bool:
        node = self._nodes.get(_norm(path))
        return node is not None and node.readable

    def can_write(self, path: str) -> bool:
        node = self._nodes.get(_norm(path))
        return node is not None and node.writable

    def get_xattr(self, path: str, name: str) -> Optional[bytes]:
        return self._node(path, f"read {name} of").xattrs.get(name)

    def set_xattr(self, path: str, name: str, value: bytes) -> None:
        if self._debug:
            print(f"[fileicon] setxattr {name} {path!r}: {len(value)} bytes", flush=True)
        self._node(path, f"write {name} of", write=True).xattrs[name] = bytes(value)

    def remove_xattr(self, path: str, name: str) -> bool:
        node = self._node(path, f"remove {name} of", write=True)
        return node.xattrs.pop(name, None) is not None

    def read_file(self, path: str) -> bytes:
        node = self._node(path, "read")
        if node.is_dir:
            raise NotFoundError(f"Cannot read '{path}': is a folder")
        return node.data

    def write_file(self, path: str, data: bytes) -> None:
        parent = posixpath.dirname(_norm(path))
        if parent and parent in self._nodes:
            self._node(parent, "write into", write=True)
        if self.exists(path):
            self._node(path, "write", write=True).data = bytes(data)
        else:
            self.add_file(path, bytes(data))

    def remove_file(self, path: str) -> bool:
        if not self.exists(path):
            return False
        parent = posixpath.dirname(_norm(path))
        if parent in self._nodes:
            self._node(parent, "remove from", write=True)
        del self._nodes[_norm(path)]
        return True


def build_icns(image_data: bytes, element_type: bytes = ICNS_ELEMENT_512) -> bytes:
    """Wrap image data into a single-element icns container."""
    element = element_type + struct.pack(">I", ICNS_HEADER_SIZE + len(image_data)) + image_data
    return ICNS_MAGIC + struct.pack(">I", ICNS_HEADER_SIZE + len(element)) + element


class MemoryIconGenerator:
    """IconGenerator working on a MemoryFilesystem.

    Like NSWorkspace it always reports success, but only writes an icon for
    images whose signature it recognizes.
    """

    def __init__(self, filesystem: MemoryFilesystem, debug: bool = False):
        self._fs = filesystem
        self._debug = debug
        self.calls = 0

    def set_icon(self, image_path: str, target_path: str) -> bool:
        self.calls += 1
        image_data = self._fs.read_file(image_path)
        fork_path = resolve_fork_path(self._fs, target_path)

        if not image_data.startswith(IMAGE_SIGNATURES):
            # Same as NSWorkspace given a nil image: the existing icon goes
            if self._debug:
                print(f"[fileicon] unrecognized image {image_path!r}, icon cleared", flush=True)
            clear_custom_icon_flag(self._fs, target_path)
            if fork_path != target_path:
                self._fs.remove_file(fork_path)
            else:
                self._fs.remove_xattr(fork_path, RESOURCE_FORK_NAME)
            return True

        if fork_path != target_path:
            if not self._fs.is_file(fork_path):
                self._fs.add_file(fork_path)
            self._fs.set_xattr(fork_path, FINDER_INFO_NAME, ICON_FILE_FINDER_INFO)

        self._fs.set_xattr(fork_path, RESOURCE_FORK_NAME, build_resource_fork(build_icns(image_data)))
        set_custom_icon_flag(self._fs, target_path)
        return True
