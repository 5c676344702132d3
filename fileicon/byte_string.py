"""
Hex byte-string helpers.

Binary attribute values are handled as strings of hex digits, two per byte
and without separators, so single bytes can be inspected and patched by index
and whole values compared against literal constants.
"""

import binascii
import re
from typing import Optional, Tuple

from .errors import ByteStringError

# Patch operators: '|XX' sets the bits of XX, '~XX' clears them.
OP_SET = "|"
OP_CLEAR = "~"

_HEX_BYTE = re.compile(r"[0-9A-Fa-f]{2}")


def decode(buffer: bytes, uppercase: bool = False) -> str:
    """Render a buffer as a hex byte string.

    Args:
        buffer: Raw bytes.
        uppercase: Use A-F instead of a-f.

    Returns:
        Two hex digits per byte, no separators.
    """
    byte_string = buffer.hex()
    return byte_string.upper() if uppercase else byte_string


def encode(byte_string: str) -> bytes:
    """Inverse of decode(); accepts either case."""
    try:
        return binascii.unhexlify(byte_string)
    except (binascii.Error, ValueError) as e:
        raise ByteStringError(f"Not a hex byte string: {byte_string!r}") from e


def byte_at(byte_string: str, index: int) -> int:
    """Return the value of the byte at index."""
    if not 0 <= index < len(byte_string) // 2:
        raise ByteStringError(f"Byte index {index} out of range")
    return int(byte_string[2 * index:2 * index + 2], 16)


def parse_patch_spec(spec: str) -> Tuple[Optional[str], int]:
    """Split a patch spec into (operator, value).

    The operator is OP_SET, OP_CLEAR or None for a literal replacement.
    """
    op = None
    value = spec
    if spec[:1] in (OP_SET, OP_CLEAR):
        op, value = spec[0], spec[1:]
    if not _HEX_BYTE.fullmatch(value):
        raise ByteStringError(f"Invalid byte value in patch spec: {spec!r}")
    return op, int(value, 16)


def patch_byte(byte_string: str, index: int, spec: str,
               uppercase: bool = False) -> str:
    """Return a copy of byte_string with the byte at index patched.

    Args:
        byte_string: Hex byte string, as produced by decode().
        index: 0-based byte index.
        spec: 'XX' to replace the byte, '|XX' to OR it with XX, '~XX' to
              AND it with the complement of XX.
        uppercase: Render the patched byte with A-F instead of a-f.

    Returns:
        The patched byte string.

    Raises:
        ByteStringError: index out of range or spec not a valid hex byte.
    """
    op, value = parse_patch_spec(spec)
    current = byte_at(byte_string, index)

    if op == OP_SET:
        patched = current | value
    elif op == OP_CLEAR:
        patched = current & ~value & 0xFF
    else:
        patched = value

    fmt = "{:02X}" if uppercase else "{:02x}"
    pos = 2 * index
    return byte_string[:pos] + fmt.format(patched) + byte_string[pos + 2:]
