"""
Text and number reconstruction for constant pool payloads.

Class files store strings in modified UTF-8 and numbers as raw big-endian
bit patterns. The float and double routines rebuild the value from the bit
fields instead of delegating to ``struct`` so that the special values
(infinities, NaN ranges, subnormals, signed zero) follow the class file
rules exactly.
"""

import math


REPLACEMENT_CHARACTER = "\ufffd"

FLOAT_POSITIVE_INFINITY = 0x7F800000
FLOAT_NEGATIVE_INFINITY = 0xFF800000
DOUBLE_POSITIVE_INFINITY = 0x7FF0000000000000
DOUBLE_NEGATIVE_INFINITY = 0xFFF0000000000000


def decode_modified_utf8(data: bytes) -> str:
    """Decode modified UTF-8 bytes into a Python string.

    Supplementary characters arrive as two three-byte surrogates (six bytes
    in total) and are joined back into a single code point. A surrogate
    without its partner is kept as is. Malformed or truncated sequences
    become U+FFFD instead of raising.
    """
    chars = []
    length = len(data)
    i = 0
    while i < length:
        x = data[i]
        if x < 0x80:
            # 0x00 is not legal on its own but is harmless to keep
            chars.append(chr(x))
            i += 1
        elif 0xC0 <= x <= 0xDF:
            if i + 1 < length and _is_continuation(data[i + 1]):
                y = data[i + 1]
                chars.append(chr(((x & 0x1F) << 6) + (y & 0x3F)))
                i += 2
            else:
                chars.append(REPLACEMENT_CHARACTER)
                i += 1
        elif 0xE0 <= x <= 0xEF:
            if _is_surrogate_pair(data, i):
                v, w, y, z = data[i + 1], data[i + 2], data[i + 4], data[i + 5]
                code_point = (0x10000 + ((v & 0x0F) << 16) + ((w & 0x3F) << 10)
                              + ((y & 0x0F) << 6) + (z & 0x3F))
                chars.append(chr(code_point))
                i += 6
            elif (i + 2 < length and _is_continuation(data[i + 1])
                    and _is_continuation(data[i + 2])):
                y, z = data[i + 1], data[i + 2]
                chars.append(chr(((x & 0x0F) << 12) + ((y & 0x3F) << 6) + (z & 0x3F)))
                i += 3
            else:
                chars.append(REPLACEMENT_CHARACTER)
                i += 1
        else:
            # Stray continuation byte or a four-byte standard UTF-8 lead
            chars.append(REPLACEMENT_CHARACTER)
            i += 1
    return "".join(chars)


def _is_continuation(byte: int) -> bool:
    return byte & 0xC0 == 0x80


def _is_surrogate_pair(data: bytes, i: int) -> bool:
    if i + 5 >= len(data):
        return False
    return (data[i] == 0xED
            and data[i + 1] & 0xF0 == 0xA0
            and _is_continuation(data[i + 2])
            and data[i + 3] == 0xED
            and data[i + 4] & 0xF0 == 0xB0
            and _is_continuation(data[i + 5]))


def int_from_bytes(data: bytes) -> int:
    """Signed 32-bit integer from four big-endian bytes."""
    return int.from_bytes(data, "big", signed=True)


def combine_halves(high: int, low: int) -> int:
    """Unsigned 64-bit value from two unsigned 32-bit halves."""
    return (high << 32) | low


def to_signed64(value: int) -> int:
    if value & (1 << 63):
        return value - (1 << 64)
    return value


def float_from_bits(bits: int) -> float:
    """Reconstruct a 32-bit IEEE-754 float from its bit pattern."""
    if bits == FLOAT_POSITIVE_INFINITY:
        return math.inf
    if bits == FLOAT_NEGATIVE_INFINITY:
        return -math.inf
    if 0x7F800001 <= bits <= 0x7FFFFFFF or 0xFF800001 <= bits <= 0xFFFFFFFF:
        return math.nan

    negative = bool(bits >> 31)
    exponent = (bits >> 23) & 0xFF
    if exponent == 0:
        mantissa = (bits & 0x7FFFFF) << 1
    else:
        mantissa = (bits & 0x7FFFFF) | 0x800000
    value = math.ldexp(float(mantissa), exponent - 150)
    return -value if negative else value


def double_from_bits(bits: int) -> float:
    """Reconstruct a 64-bit IEEE-754 double from its bit pattern."""
    if bits == DOUBLE_POSITIVE_INFINITY:
        return math.inf
    if bits == DOUBLE_NEGATIVE_INFINITY:
        return -math.inf
    if (0x7FF0000000000001 <= bits <= 0x7FFFFFFFFFFFFFFF
            or 0xFFF0000000000001 <= bits <= 0xFFFFFFFFFFFFFFFF):
        return math.nan

    negative = bool(bits >> 63)
    exponent = (bits >> 52) & 0x7FF
    if exponent == 0:
        mantissa = (bits & 0xFFFFFFFFFFFFF) << 1
    else:
        mantissa = (bits & 0xFFFFFFFFFFFFF) | 0x10000000000000
    # mantissa < 2**53, so float() and ldexp are exact
    value = math.ldexp(float(mantissa), exponent - 1075)
    return -value if negative else value
