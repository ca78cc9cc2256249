"""
Base64 codec with the standard alphabet and "=" padding.

Uses:
A - Z (26)
a - z (26)
0 - 9 (10)
+     (1)
/     (1)

Text is handled like a null-terminated ASCII string: anything after the first
NUL byte is ignored. The *_into functions write into a caller-sized buffer and
never grow it; encode_base64() and decode_base64() allocate the buffer for you.
"""

from typing import Optional

# Lookup variables used for conversion
_int_to_char_code: list[int] = []
_char_code_to_int: dict[int, int] = {}
_size = 64
_pad_char = ord("=")
_terminator = 0


def fill_lookup_variables():
    for char_code in range(ord("A"), ord("Z") + 1):
        _char_code_to_int[char_code] = len(_int_to_char_code)
        _int_to_char_code.append(char_code)

    for char_code in range(ord("a"), ord("z") + 1):
        _char_code_to_int[char_code] = len(_int_to_char_code)
        _int_to_char_code.append(char_code)

    for char_code in range(ord("0"), ord("9") + 1):
        _char_code_to_int[char_code] = len(_int_to_char_code)
        _int_to_char_code.append(char_code)

    for char_code in (ord(ch) for ch in "+/"):
        _char_code_to_int[char_code] = len(_int_to_char_code)
        _int_to_char_code.append(char_code)


fill_lookup_variables()
assert len(_int_to_char_code) == _size
assert len(_char_code_to_int) == _size


def _terminated(text) -> bytes:
    """
    Return the bytes of `text` up to (not including) the first NUL.

    Raises UnicodeEncodeError for a str that is not ASCII.
    """
    if isinstance(text, str):
        data = text.encode("ascii")
    else:
        data = bytes(text)
    end = data.find(_terminator)
    if end >= 0:
        data = data[:end]
    return data


def encoded_size(size: int) -> int:
    """Buffer capacity needed to encode `size` bytes, terminator included."""
    return 4 * ((size + 2) // 3) + 1


def is_valid_base64(text) -> int:
    """
    Check that `text` is a well-formed encoding and return its decoded length.

    Returns 0 for invalid text. The empty string is valid and also returns 0,
    so 0 means "nothing to decode" either way.
    """
    try:
        data = _terminated(text)
    except UnicodeEncodeError:
        return 0

    length = len(data)
    if length % 4 != 0:
        return 0

    padding = 0
    for ii, ch in enumerate(data):
        if ch == _pad_char:
            # at most the last two characters
            if ii < length - 2:
                return 0
            padding += 1
        elif ch in _char_code_to_int:
            if padding:
                return 0
        else:
            return 0

    return 3 * (length // 4) - padding


def encode_base64_into(buffer, data: Optional[bytes], size: Optional[int] = None) -> int:
    """
    Write the encoding of data[:size] plus a NUL terminator into `buffer`.

    Returns the number of bytes written, terminator included. `buffer` must
    hold at least encoded_size(size) bytes.
    """
    if size is None:
        size = 0 if data is None else len(data)

    pos = 0
    for start in range(0, size, 3):
        chunk = data[start : min(start + 3, size)]

        # pack the chunk into 24 bits, zero filling the missing low bytes
        bits = 0
        for byte in chunk:
            bits = (bits << 8) | byte
        bits <<= 8 * (3 - len(chunk))

        real_chars = len(chunk) + 1
        for ii in range(4):
            if ii < real_chars:
                buffer[pos] = _int_to_char_code[(bits >> (18 - 6 * ii)) & 0x3F]
            else:
                buffer[pos] = _pad_char
            pos += 1

    buffer[pos] = _terminator
    return pos + 1


def decode_base64_into(buffer, text) -> int:
    """
    Decode validated base64 `text` into `buffer` and return the byte count.

    Validate with is_valid_base64() first; it also gives the required size of
    `buffer`. Output for text it rejects is unspecified.
    """
    data = _terminated(text)

    pos = 0
    for start in range(0, len(data), 4):
        values = []
        for ch in data[start : start + 4]:
            if ch == _pad_char:
                break
            values.append(_char_code_to_int.get(ch, 0))

        num_bytes = len(values) - 1
        if num_bytes <= 0:
            break

        bits = 0
        for value in values:
            bits = (bits << 6) | value
        bits <<= 6 * (4 - len(values))

        for ii in range(num_bytes):
            buffer[pos] = (bits >> (16 - 8 * ii)) & 0xFF
            pos += 1

        if len(values) < 4:
            # padding only ends the final group
            break

    return pos


def encode_base64(data: bytes) -> bytes:
    buffer = bytearray(encoded_size(len(data)))
    written = encode_base64_into(buffer, data)
    return bytes(buffer[: written - 1])


def decode_base64(text) -> bytes:
    """
    Validate and decode `text`. Raises ValueError if it is not valid base64.
    """
    expected = is_valid_base64(text)
    if expected == 0:
        if text and text[0] not in ("\0", 0):
            raise ValueError(f"Invalid base64 text: {text!r:.60}")
        return b""
    buffer = bytearray(expected)
    written = decode_base64_into(buffer, text)
    if written != expected:
        raise RuntimeError(f"Buggy! decoded {written} bytes, expected {expected}")
    return bytes(buffer)
