"""
macOS resource fork scanning and building for custom icons.

A custom icon is stored as an 'icns' resource in the resource fork of the
file, or, for a folder, in the resource fork of the hidden Icon\\r file
inside it. The icns container starts with the 4-byte magic 'icns' followed by
a 4-byte big-endian length that covers the whole container, header included.
Only that one resource matters here; the rest of the fork is opaque.
"""

import os
import struct
from typing import BinaryIO, List, NamedTuple, Tuple

from .backend import RESOURCE_FORK_NAME, FilesystemBackend
from .errors import CorruptResourceError, IconContainerNotFoundError, NoIconPresentError

# Resource fork constants
ICNS_MAGIC = b"icns"
ICNS_RESOURCE_TYPE = ICNS_MAGIC
ICNS_RESOURCE_ID = -16455  # Standard ID for custom file icons
ICNS_HEADER_SIZE = 8  # magic + length

ICON_FILE = "Icon\r"  # Folder custom icon file


class IconContainerLocation(NamedTuple):
    """Where an icns container sits inside a resource fork."""
    offset: int  # position of the magic
    length: int  # container length as declared, header included

    @property
    def payload_offset(self) -> int:
        return self.offset + ICNS_HEADER_SIZE

    @property
    def end(self) -> int:
        return self.offset + self.length


def has_icon_container(fork: bytes) -> bool:
    """Check whether the fork contains the icns magic anywhere."""
    return ICNS_MAGIC in fork


def locate_icon_container(fork: bytes) -> IconContainerLocation:
    """Find the first icns container in a resource fork.

    Raises:
        IconContainerNotFoundError: no icns magic in the fork.
        CorruptResourceError: magic found but the length field is missing,
            too small to cover the header, or runs past the end of the fork.
    """
    offset = fork.find(ICNS_MAGIC)
    if offset < 0:
        raise IconContainerNotFoundError("Resource fork contains no icons resource")

    length_field = fork[offset + len(ICNS_MAGIC):offset + ICNS_HEADER_SIZE]
    if len(length_field) < 4:
        raise CorruptResourceError(f"Truncated icns header at offset {offset}")
    length, = struct.unpack(">I", length_field)

    location = IconContainerLocation(offset, length)
    if length < ICNS_HEADER_SIZE:
        raise CorruptResourceError(f"Implausible icns length {length} at offset {offset}")
    if location.end > len(fork):
        raise CorruptResourceError(
            f"icns container at offset {offset} claims {length} bytes, "
            f"only {len(fork) - offset} available"
        )
    return location


def extract_icon_container(fork: bytes, destination: BinaryIO) -> int:
    """Copy the icns container out of a fork into a binary stream.

    Returns:
        Number of bytes written.
    """
    location = locate_icon_container(fork)
    return destination.write(fork[location.offset:location.end])


def resolve_fork_path(backend: FilesystemBackend, entry: str) -> str:
    """Return the path whose resource fork holds entry's custom icon."""
    if backend.is_dir(entry):
        return os.path.join(entry, ICON_FILE)
    return entry


def load_resource_fork(backend: FilesystemBackend, entry: str) -> bytes:
    """Read the resource fork carrying entry's icon.

    An absent fork reads as empty.

    Raises:
        NoIconPresentError: entry is a folder without an Icon\\r file.
    """
    fork_path = resolve_fork_path(backend, entry)
    if fork_path != entry and not backend.is_file(fork_path):
        shown = fork_path.replace("\r", "\\r")
        raise NoIconPresentError(f"Custom-icon file does not exist: '{shown}'")
    return backend.get_xattr(fork_path, RESOURCE_FORK_NAME) or b""


def build_resource_fork(icns_data: bytes) -> bytes:
    """Build a macOS resource fork containing an ICNS icon resource.

    On macOS the fork is written by NSWorkspace; this builder is what
    MemoryIconGenerator uses to produce the same layout in memory.

    The resource fork format is:
    - Resource header (256 bytes)
    - Resource data section
    - Resource map section

    Args:
        icns_data: The ICNS icon data.

    Returns:
        The resource fork data.
    """
    # Each resource data entry is: 4-byte length + data
    resource_data = struct.pack(">I", len(icns_data)) + icns_data

    data_offset = 256  # Header is 256 bytes
    data_length = len(resource_data)
    map_offset = data_offset + data_length

    resource_map = _build_resource_map(
        [(ICNS_RESOURCE_TYPE, ICNS_RESOURCE_ID, 0)],
        data_offset, map_offset, data_length
    )

    # First 16 bytes: offsets and lengths, bytes 16-255 reserved
    header = struct.pack(">IIII", data_offset, map_offset, data_length, len(resource_map))
    header = header + b"\x00" * (256 - len(header))

    return header + resource_data + resource_map


def _build_resource_map(
    resources: List[Tuple[bytes, int, int]],
    data_offset: int,
    map_offset: int,
    data_length: int
) -> bytes:
    """Build the resource map section for build_resource_fork.

    Args:
        resources: List of (type, id, data_offset) tuples.
        data_offset: Offset to resource data section (from file header).
        map_offset: Offset to this resource map (from file header).
        data_length: Length of resource data section.

    Returns:
        The resource map bytes.
    """
    # Resource map structure:
    # - Copy of header (16 bytes)
    # - Handle to next resource map (4 bytes) - 0
    # - File reference number (2 bytes) - 0
    # - Resource fork attributes (2 bytes) - 0
    # - Offset to type list from map start (2 bytes)
    # - Offset to name list from map start (2 bytes)
    # - Type list
    # - Reference list(s)
    # - Name list (empty)

    types_dict = {}
    for res_type, res_id, res_data_offset in resources:
        types_dict.setdefault(res_type, []).append((res_id, res_data_offset))

    map_header_size = 28
    type_list_offset = map_header_size
    type_list_size = 2 + (8 * len(types_dict))

    type_list = bytearray(struct.pack(">H", len(types_dict) - 1))
    ref_lists = bytearray()

    current_ref_offset = 0
    for res_type, refs in types_dict.items():
        # Type entry: type (4) + count-1 (2) + ref offset (2)
        type_list.extend(res_type)
        type_list.extend(struct.pack(">HH", len(refs) - 1, type_list_size + current_ref_offset))

        for res_id, res_data_offset in refs:
            # Reference entry: id (2, signed), name offset (2, 0xFFFF = none),
            # attributes + 3-byte data offset (4), handle (4)
            ref_lists.extend(struct.pack(">hHII", res_id, 0xFFFF,
                                         res_data_offset & 0x00FFFFFF, 0))

        current_ref_offset += len(refs) * 12

    name_list_offset = type_list_offset + len(type_list) + len(ref_lists)
    map_length = map_header_size + len(type_list) + len(ref_lists)

    map_header = bytearray(map_header_size)
    struct.pack_into(">IIII", map_header, 0, data_offset, map_offset, data_length, map_length)
    struct.pack_into(">HH", map_header, 24, type_list_offset, name_list_offset)

    return bytes(map_header) + bytes(type_list) + bytes(ref_lists)
