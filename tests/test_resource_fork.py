import io
import struct

import pytest

from fileicon.backend import RESOURCE_FORK_NAME
from fileicon.errors import CorruptResourceError, IconContainerNotFoundError, NoIconPresentError
from fileicon.memory import build_icns
from fileicon.resource_fork import (
    ICON_FILE,
    IconContainerLocation,
    build_resource_fork,
    extract_icon_container,
    has_icon_container,
    load_resource_fork,
    locate_icon_container,
    resolve_fork_path,
)


@pytest.fixture
def icns(png_data):
    return build_icns(png_data)


@pytest.fixture
def fork(icns):
    return build_resource_fork(icns)


def test_build_icns_header(icns, png_data):
    assert icns[:4] == b"icns"
    assert struct.unpack(">I", icns[4:8])[0] == len(icns)
    assert icns[8:12] == b"ic09"
    assert icns.endswith(png_data)


def test_resource_fork_layout(fork, icns):
    data_offset, map_offset, data_length, map_length = struct.unpack(">IIII", fork[:16])
    assert data_offset == 256
    assert data_length == 4 + len(icns)
    assert map_offset == 256 + data_length
    assert len(fork) == map_offset + map_length
    assert fork[256:260] == struct.pack(">I", len(icns))
    # the map starts with a copy of the header
    assert fork[map_offset:map_offset + 16] == fork[:16]
    # single type entry: icns, one resource
    type_list = map_offset + 28
    assert fork[type_list:type_list + 2] == b"\x00\x00"
    assert fork[type_list + 2:type_list + 6] == b"icns"
    ref = map_offset + 28 + 10
    assert struct.unpack(">h", fork[ref:ref + 2])[0] == -16455


def test_has_icon_container(fork):
    assert has_icon_container(fork)
    assert not has_icon_container(b"")
    assert not has_icon_container(b"\x00" * 300)


def test_locate(fork, icns):
    location = locate_icon_container(fork)
    assert location == IconContainerLocation(260, len(icns))
    assert location.payload_offset == 268
    assert location.end == 260 + len(icns)


def test_first_match_wins(icns):
    second = build_icns(b"\xff\xd8\xff" + b"\x01" * 10)
    fork = b"\x00" * 16 + icns + second
    assert locate_icon_container(fork) == IconContainerLocation(16, len(icns))


def test_locate_missing_magic():
    with pytest.raises(IconContainerNotFoundError):
        locate_icon_container(b"\x00" * 64)


def test_missing_container_is_no_icon():
    with pytest.raises(NoIconPresentError):
        locate_icon_container(b"")


@pytest.mark.parametrize("fork", [
    b"\x00\x00\x00\x00icns\x00\x00",            # truncated length field
    b"\x00\x00\x00\x00icns\x00\x00\x00\x00",    # zero length
    b"icns\x00\x00\x00\x04",                    # shorter than its own header
    b"icns" + struct.pack(">I", 100) + b"\x00" * 10,  # runs past the end
])
def test_locate_corrupt(fork):
    with pytest.raises(CorruptResourceError):
        locate_icon_container(fork)


def test_extract(fork, icns):
    out = io.BytesIO()
    assert extract_icon_container(fork, out) == len(icns)
    assert out.getvalue() == icns


def test_resolve_fork_path(fs, target_file, target_folder):
    assert resolve_fork_path(fs, target_file) == target_file
    assert resolve_fork_path(fs, target_folder) == "/work/folder/Icon\r"
    assert ICON_FILE == "Icon\r"


def test_load_fork_of_file(fs, target_file, fork):
    assert load_resource_fork(fs, target_file) == b""
    fs.set_xattr(target_file, RESOURCE_FORK_NAME, fork)
    assert load_resource_fork(fs, target_file) == fork


def test_load_fork_of_folder_reads_icon_file(fs, target_folder, fork):
    with pytest.raises(NoIconPresentError, match=r"Icon\\r"):
        load_resource_fork(fs, target_folder)

    fs.add_file(target_folder + "/" + ICON_FILE)
    fs.set_xattr(target_folder + "/" + ICON_FILE, RESOURCE_FORK_NAME, fork)
    assert load_resource_fork(fs, target_folder) == fork
