"""
FinderInfo custom icon flag handling.

FinderInfo is a 32-byte structure stored in the com.apple.FinderInfo
extended attribute:
- Bytes 0-3: file type
- Bytes 4-7: file creator
- Bytes 8-9: Finder flags (big-endian)
- Bytes 10-15: location / reserved
- Bytes 16-31: extended FinderInfo

kHasCustomIcon is 0x0400 in the flags word, i.e. bit 0x04 of byte 8. That bit
is the only one read or written here; everything else is preserved.
"""

from typing import Optional

from . import byte_string
from .backend import FINDER_INFO_NAME, FilesystemBackend

FINDER_INFO_SIZE = 32

# Byte offset and bit mask of the custom icon flag
CUSTOM_ICON_OFFSET = 8
CUSTOM_ICON_FLAG = 0x04

BLANK_FINDER_INFO = b"\x00" * FINDER_INFO_SIZE

# FinderInfo of a folder's Icon\r file: type 'icon', creator 'MACS',
# flags kIsInvisible | kHasBeenInited
ICON_FILE_FINDER_INFO = byte_string.encode(
    "69636F6E4D414353401000000000000000000000000000000000000000000000"
)


def _normalize(raw: bytes) -> bytes:
    if len(raw) < FINDER_INFO_SIZE:
        return raw + b"\x00" * (FINDER_INFO_SIZE - len(raw))
    return raw[:FINDER_INFO_SIZE]


def read_finder_info(backend: FilesystemBackend, entry: str) -> Optional[bytes]:
    """Return the 32-byte FinderInfo of entry, or None if it has none."""
    raw = backend.get_xattr(entry, FINDER_INFO_NAME)
    if raw is None:
        return None
    return _normalize(raw)


def build_finder_info(has_custom_icon: bool = True) -> bytes:
    """Build a FinderInfo structure with only the custom icon flag set."""
    info = bytearray(FINDER_INFO_SIZE)
    if has_custom_icon:
        info[CUSTOM_ICON_OFFSET] = CUSTOM_ICON_FLAG
    return bytes(info)


def has_custom_icon_flag(backend: FilesystemBackend, entry: str) -> bool:
    """Check the custom icon flag. An absent attribute means 'not set'."""
    info = read_finder_info(backend, entry)
    if info is None:
        return False
    return bool(info[CUSTOM_ICON_OFFSET] & CUSTOM_ICON_FLAG)


def set_custom_icon_flag(backend: FilesystemBackend, entry: str) -> None:
    """Set the custom icon flag, creating the attribute if needed."""
    info = read_finder_info(backend, entry) or BLANK_FINDER_INFO
    patched = byte_string.patch_byte(
        byte_string.decode(info), CUSTOM_ICON_OFFSET, f"|{CUSTOM_ICON_FLAG:02x}"
    )
    backend.set_xattr(entry, FINDER_INFO_NAME, byte_string.encode(patched))


def clear_custom_icon_flag(backend: FilesystemBackend, entry: str) -> None:
    """Clear the custom icon flag.

    Does nothing if the attribute is absent. If no bit is left set afterwards
    the whole attribute is removed instead of storing 32 zero bytes.
    """
    info = read_finder_info(backend, entry)
    if info is None:
        return

    patched = byte_string.encode(byte_string.patch_byte(
        byte_string.decode(info), CUSTOM_ICON_OFFSET, f"~{CUSTOM_ICON_FLAG:02x}"
    ))
    if patched == BLANK_FINDER_INFO:
        backend.remove_xattr(entry, FINDER_INFO_NAME)
    else:
        backend.set_xattr(entry, FINDER_INFO_NAME, patched)
