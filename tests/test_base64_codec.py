"""Base64 codec tests."""

import base64
import random

import pytest

from base64_codec import (
    decode_base64,
    decode_base64_into,
    encode_base64,
    encode_base64_into,
    encoded_size,
    is_valid_base64,
)


@pytest.mark.parametrize(
    "data, text",
    [
        (bytes([15, 134, 190, 255, 240]), b"D4a+//A="),
        (b"ABC", b"QUJD"),
        (b"AB", b"QUI="),
        (b"A", b"QQ=="),
        (bytes([255, 255, 255]), b"////"),
    ],
)
def test_encode_into_vectors(data, text):
    buffer = bytearray(encoded_size(len(data)))
    n = encode_base64_into(buffer, data)
    assert bytes(buffer[: n - 1]) == text
    assert buffer[n - 1] == 0
    assert n == len(text) + 1
    assert n == len(buffer)


def test_encode_into_null_input():
    buffer = bytearray(1)
    n = encode_base64_into(buffer, None, 0)
    assert n == 1
    assert buffer[0] == 0


def test_encode_into_uses_size_argument():
    buffer = bytearray(encoded_size(3))
    n = encode_base64_into(buffer, b"ABCDEF", 3)
    assert bytes(buffer[: n - 1]) == b"QUJD"


def test_encode_into_undersized_buffer_is_not_grown():
    buffer = bytearray(4)
    with pytest.raises(IndexError):
        encode_base64_into(buffer, b"ABC")
    assert len(buffer) == 4


def test_encode_into_memoryview():
    storage = bytearray(encoded_size(2))
    n = encode_base64_into(memoryview(storage), b"AB")
    assert n == 5
    assert bytes(storage) == b"QUI=\0"


def test_is_valid_empty():
    assert is_valid_base64("") == 0
    assert is_valid_base64(b"") == 0


@pytest.mark.parametrize("text", ["A", "AAA", "A==A", "A===", "aaaa====", "A#AA", "AB=A", "=AAA"])
def test_is_valid_rejects(text):
    assert is_valid_base64(text) == 0


@pytest.mark.parametrize(
    "text, size",
    [("AB+/", 3), ("ABC=", 2), ("AB==", 1), ("az09AZ+/11==", 7), ("QUJDQUJD", 6)],
)
def test_is_valid_accepts(text, size):
    assert is_valid_base64(text) == size
    assert is_valid_base64(text.encode()) == size


def test_is_valid_stops_at_terminator():
    assert is_valid_base64(b"QUJD\0not base64") == 3
    assert is_valid_base64("QQ==\0") == 1


def test_is_valid_non_ascii():
    assert is_valid_base64("QUJé") == 0


@pytest.mark.parametrize(
    "text, data",
    [
        ("D4a+//A=", bytes([15, 134, 190, 255, 240])),
        ("QUJD", b"ABC"),
        ("QUI=", b"AB"),
        ("QQ==", b"A"),
        ("////", bytes([255, 255, 255])),
    ],
)
def test_decode_into_vectors(text, data):
    buffer = bytearray(is_valid_base64(text))
    n = decode_base64_into(buffer, text)
    assert bytes(buffer) == data
    assert n == len(buffer)


def test_decode_into_null_buffer_empty_text():
    assert decode_base64_into(None, "") == 0


def test_decode_into_reads_terminated_encoder_output():
    encoded = bytearray(encoded_size(5))
    encode_base64_into(encoded, b"hello")
    buffer = bytearray(is_valid_base64(encoded))
    assert decode_base64_into(buffer, encoded) == 5
    assert bytes(buffer) == b"hello"


@pytest.mark.parametrize("text", ["AB+/", "ABC=", "AB==", "az09AZ+/11==", "D4a+//A="])
def test_validator_agrees_with_decoder(text):
    buffer = bytearray(16)
    assert decode_base64_into(buffer, text) == is_valid_base64(text)


def test_round_trip_bytes():
    rng = random.Random(1234)
    for size in range(0, 64):
        data = bytes(rng.randrange(256) for _ in range(size))
        text = encode_base64(data)
        assert text == base64.b64encode(data)
        assert len(text) == 4 * ((size + 2) // 3)
        assert is_valid_base64(text) == size
        assert decode_base64(text) == data


@pytest.mark.parametrize("text", [b"QUJD", b"QUI=", b"QQ==", b"D4a+//A=", b"az09AZ+/1w=="])
def test_round_trip_canonical_text(text):
    assert encode_base64(decode_base64(text)) == text


def test_encode_empty():
    assert encode_base64(b"") == b""


def test_decode_empty():
    assert decode_base64("") == b""
    assert decode_base64(b"\0") == b""


@pytest.mark.parametrize("text", ["A#AA", "AAA", "A===", "QUJé"])
def test_decode_invalid(text):
    with pytest.raises(ValueError, match="Invalid base64"):
        decode_base64(text)


@pytest.mark.parametrize("size, capacity", [(0, 1), (1, 5), (2, 5), (3, 5), (4, 9), (5, 9)])
def test_encoded_size(size, capacity):
    assert encoded_size(size) == capacity
