import pytest

from fileicon.backend import FINDER_INFO_NAME
from fileicon.errors import NotFoundError, PermissionDeniedError
from fileicon.finder_info import (
    BLANK_FINDER_INFO,
    CUSTOM_ICON_FLAG,
    CUSTOM_ICON_OFFSET,
    ICON_FILE_FINDER_INFO,
    build_finder_info,
    clear_custom_icon_flag,
    has_custom_icon_flag,
    read_finder_info,
    set_custom_icon_flag,
)


def _info_with(**offsets):
    info = bytearray(32)
    for offset, value in offsets.items():
        info[int(offset[1:])] = value
    return bytes(info)


def test_constants():
    assert CUSTOM_ICON_OFFSET == 8
    assert CUSTOM_ICON_FLAG == 0x04
    assert len(ICON_FILE_FINDER_INFO) == 32
    assert ICON_FILE_FINDER_INFO[:8] == b"iconMACS"


def test_build_finder_info():
    assert build_finder_info() == _info_with(b8=0x04)
    assert build_finder_info(has_custom_icon=False) == BLANK_FINDER_INFO


def test_absent_attribute_is_not_set(fs, target_file):
    assert read_finder_info(fs, target_file) is None
    assert has_custom_icon_flag(fs, target_file) is False


def test_set_creates_attribute(fs, target_file):
    set_custom_icon_flag(fs, target_file)
    assert fs.get_xattr(target_file, FINDER_INFO_NAME) == _info_with(b8=0x04)
    assert has_custom_icon_flag(fs, target_file)


def test_set_preserves_other_bytes(fs, target_file):
    before = b"TEXTttxt" + b"\x00\x10" + b"\x00" * 20 + b"\x99\x00"
    fs.set_xattr(target_file, FINDER_INFO_NAME, before)

    set_custom_icon_flag(fs, target_file)

    after = fs.get_xattr(target_file, FINDER_INFO_NAME)
    assert after[CUSTOM_ICON_OFFSET] == 0x04
    assert after[:8] == before[:8]
    assert after[9:] == before[9:]


def test_clear_removes_attribute_when_blank(fs, target_file):
    set_custom_icon_flag(fs, target_file)
    clear_custom_icon_flag(fs, target_file)
    assert FINDER_INFO_NAME not in fs.xattrs(target_file)


def test_clear_keeps_other_bits(fs, target_file):
    fs.set_xattr(target_file, FINDER_INFO_NAME, _info_with(b8=0x44, b9=0x10))
    clear_custom_icon_flag(fs, target_file)
    assert fs.get_xattr(target_file, FINDER_INFO_NAME) == _info_with(b8=0x40, b9=0x10)


def test_clear_absent_is_noop(fs, target_file):
    clear_custom_icon_flag(fs, target_file)
    assert fs.xattrs(target_file) == {}


def test_short_attribute_is_padded(fs, target_file):
    fs.set_xattr(target_file, FINDER_INFO_NAME, b"\x00" * 8 + b"\x04")
    assert read_finder_info(fs, target_file) == _info_with(b8=0x04)
    assert has_custom_icon_flag(fs, target_file)


def test_missing_entry(fs):
    with pytest.raises(NotFoundError):
        has_custom_icon_flag(fs, "/work/missing")


def test_unreadable_entry(fs):
    fs.add_file("/work/secret", readable=False)
    with pytest.raises(PermissionDeniedError):
        has_custom_icon_flag(fs, "/work/secret")


def test_unwritable_entry(fs):
    fs.add_file("/work/locked", writable=False)
    with pytest.raises(PermissionDeniedError):
        set_custom_icon_flag(fs, "/work/locked")
    assert fs.xattrs("/work/locked") == {}
