"""Unit tests for the RLP encoder."""

from __future__ import annotations

import pytest

from custos.codec import rlp
from custos.errors import IntegerOutOfRange


class TestEncodeUint:
    """Integers are encoded as minimal big-endian byte strings."""

    def test_zero_is_empty_string(self) -> None:
        assert rlp.encode_uint(0) == b"\x80"

    def test_single_byte_is_its_own_encoding(self) -> None:
        assert rlp.encode_uint(1) == b"\x01"
        assert rlp.encode_uint(127) == b"\x7f"

    def test_128_needs_a_prefix(self) -> None:
        assert rlp.encode_uint(128) == b"\x81\x80"

    def test_multi_byte(self) -> None:
        assert rlp.encode_uint(300) == b"\x82\x01\x2c"
        assert rlp.encode_uint(1024) == b"\x82\x04\x00"

    def test_u64_max(self) -> None:
        assert rlp.encode_uint(rlp.UINT64_MAX) == b"\x88" + b"\xff" * 8

    def test_out_of_range(self) -> None:
        with pytest.raises(IntegerOutOfRange):
            rlp.encode_uint(rlp.UINT64_MAX + 1)
        with pytest.raises(IntegerOutOfRange):
            rlp.encode_uint(-1)


class TestEncodeInt:
    def test_256_bit_scalar(self) -> None:
        value = (1 << 255) + 1
        assert rlp.encode_int(value) == b"\xa0" + value.to_bytes(32, "big")

    def test_leading_zero_bytes_are_stripped(self) -> None:
        assert rlp.encode_int(0x00FF) == b"\x81\xff"

    def test_negative(self) -> None:
        with pytest.raises(IntegerOutOfRange):
            rlp.encode_int(-5)


class TestEncodeBytes:
    def test_empty(self) -> None:
        assert rlp.encode_bytes(b"") == b"\x80"

    def test_single_low_byte(self) -> None:
        assert rlp.encode_bytes(b"\x00") == b"\x00"
        assert rlp.encode_bytes(b"\x7f") == b"\x7f"

    def test_single_high_byte(self) -> None:
        assert rlp.encode_bytes(b"\x80") == b"\x81\x80"

    def test_short_string(self) -> None:
        assert rlp.encode_bytes(b"dog") == b"\x83dog"

    def test_55_bytes_is_last_short_form(self) -> None:
        data = b"a" * 55
        assert rlp.encode_bytes(data) == b"\xb7" + data

    def test_56_bytes_uses_long_form(self) -> None:
        data = b"a" * 56
        assert rlp.encode_bytes(data) == b"\xb8\x38" + data

    def test_long_length_of_length(self) -> None:
        data = b"x" * 1024
        assert rlp.encode_bytes(data) == b"\xb9\x04\x00" + data


class TestEncodeList:
    def test_empty_list(self) -> None:
        assert rlp.encode_list([]) == b"\xc0"

    def test_cat_dog(self) -> None:
        encoded = rlp.encode_list([rlp.encode_bytes(b"cat"), rlp.encode_bytes(b"dog")])
        assert encoded == bytes.fromhex("c88363617483646f67")

    def test_nested_empty_lists(self) -> None:
        # [ [], [[]], [ [], [[]] ] ]
        empty = rlp.encode_list([])
        one = rlp.encode_list([empty])
        two = rlp.encode_list([empty, one])
        assert rlp.encode_list([empty, one, two]) == bytes.fromhex("c7c0c1c0c3c0c1c0")

    def test_55_byte_payload_is_last_short_form(self) -> None:
        item = rlp.encode_bytes(b"a" * 54)
        assert len(item) == 55
        assert rlp.encode_list([item]) == b"\xf7" + item

    def test_56_byte_payload_uses_long_form(self) -> None:
        item = rlp.encode_bytes(b"a" * 55)
        assert len(item) == 56
        assert rlp.encode_list([item]) == b"\xf8\x38" + item
