import pytest

from fileicon.byte_string import byte_at, decode, encode, parse_patch_spec, patch_byte
from fileicon.errors import ByteStringError


def test_decode_lowercase_default():
    assert decode(b"\x00\xab\x10") == "00ab10"


def test_decode_uppercase():
    assert decode(b"\x00\xab\x10", uppercase=True) == "00AB10"


def test_encode_accepts_either_case():
    assert encode("00AB") == b"\x00\xab"
    assert encode("00ab") == b"\x00\xab"


def test_encode_rejects_garbage():
    with pytest.raises(ByteStringError):
        encode("zz")


def test_byte_at():
    assert byte_at("0010ff", 2) == 0xFF
    with pytest.raises(ByteStringError):
        byte_at("0010ff", 3)


def test_parse_patch_spec():
    assert parse_patch_spec("|04") == ("|", 4)
    assert parse_patch_spec("~0a") == ("~", 10)
    assert parse_patch_spec("FF") == (None, 255)


def test_patch_literal():
    assert patch_byte("0000", 0, "ab") == "ab00"
    assert patch_byte("0000", 1, "ab", uppercase=True) == "00AB"


def test_patch_set_bits():
    assert patch_byte("000000", 1, "|04") == "000400"
    assert patch_byte("000800", 1, "|04") == "000c00"


def test_patch_clear_bits():
    assert patch_byte("0c", 0, "~04") == "08"
    assert patch_byte("08", 0, "~04") == "08"


def test_or_with_zero_is_noop():
    assert patch_byte("5a", 0, "|00") == "5a"


def test_or_with_ff_sets_all_bits():
    assert patch_byte("5a", 0, "|FF") == "ff"


@pytest.mark.parametrize("index", [2, 10, -1])
def test_out_of_range_index_fails_without_change(index):
    original = "0102"
    with pytest.raises(ByteStringError):
        patch_byte(original, index, "ff")
    assert original == "0102"


@pytest.mark.parametrize("spec", ["G1", "|4", "123", "", "~", "&04"])
def test_invalid_spec(spec):
    with pytest.raises(ValueError):
        patch_byte("0000", 0, spec)
