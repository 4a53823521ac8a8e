"""Tests for the value block codec."""

import pytest
from mifarelab.rfid.mifare import LengthError, to_hex
from mifarelab.rfid.value_block import encode, decode, encode_hex, is_value_block


INT32_SAMPLES = [0, 1, -1, 100, 250, 1000, -123456, 0x12345678, 2**31 - 1, -(2**31)]


def flip(raw: bytes, byte_index: int, bit: int) -> bytes:
    data = bytearray(raw)
    data[byte_index] ^= 1 << bit
    return bytes(data)


class TestEncode:
    def test_known_block(self):
        # value 100 at address 5
        assert encode_hex(100, 5) == "64000000" "9BFFFFFF" "64000000" "05FA05FA"

    def test_negative_value_twos_complement(self):
        assert encode_hex(-1, 0) == "FFFFFFFF" "00000000" "FFFFFFFF" "00FF00FF"

    def test_length(self):
        assert len(encode(0x7FFFFFFF, 0xFF)) == 16

    def test_value_wraps_to_32_bits(self):
        assert encode(2**32 + 7, 1) == encode(7, 1)

    def test_address_wraps_to_8_bits(self):
        assert encode(7, 0x105) == encode(7, 0x05)

    def test_deterministic(self):
        assert encode(42, 9) == encode(42, 9)


class TestRoundTrip:
    @pytest.mark.parametrize("value", INT32_SAMPLES)
    @pytest.mark.parametrize("address", [0, 0x06, 0x7F, 0xFF])
    def test_round_trip(self, value, address):
        record = decode(encode(value, address))
        assert record.value == value
        assert record.value_backup == value
        assert record.address == address
        assert record.is_valid is True
        assert not any(record.errors.to_dict().values())

    def test_complement_fields(self):
        record = decode(encode(250, 0x0C))
        assert record.value_inverted == 0xFFFFFF05
        assert record.address_inverted == 0xF3
        assert record.address_backup == 0x0C
        assert record.address_inverted_backup == 0xF3


class TestMalformed:
    @pytest.mark.parametrize("byte_index", [4, 5, 6, 7])
    @pytest.mark.parametrize("bit", [0, 3, 7])
    def test_broken_complement(self, byte_index, bit):
        record = decode(flip(encode(1000, 0x16), byte_index, bit))
        assert record.is_valid is False
        assert record.errors.to_dict() == {
            "value_inverted": True,
            "value_backup": False,
            "address_inverted": False,
            "address_backup": False,
        }

    @pytest.mark.parametrize("byte_index", [8, 9, 10, 11])
    def test_broken_backup(self, byte_index):
        record = decode(flip(encode(1000, 0x16), byte_index, 0))
        assert record.is_valid is False
        assert record.errors.to_dict() == {
            "value_inverted": False,
            "value_backup": True,
            "address_inverted": False,
            "address_backup": False,
        }

    def test_broken_address_complement(self):
        record = decode(flip(encode(5, 0x21), 13, 2))
        assert record.errors.address_inverted is True
        # byte 13 no longer matches its backup at byte 15 either
        assert record.errors.address_backup is True
        assert record.errors.value_inverted is False

    def test_broken_address_backup(self):
        record = decode(flip(encode(5, 0x21), 14, 0))
        assert record.errors.address_backup is True
        assert record.errors.address_inverted is False

    def test_all_zero_block_is_not_a_value_block(self):
        record = decode(bytes(16))
        assert record.is_valid is False
        assert record.errors.value_inverted is True
        assert record.errors.address_inverted is True
        assert is_value_block(bytes(16)) is False

    def test_corrupted_value_still_decodes_primary_copy(self):
        raw = flip(encode(750, 0x0E), 8, 1)
        record = decode(raw)
        assert record.value == 750
        assert record.value_backup == 748


class TestDecodeInput:
    @pytest.mark.parametrize("size", [0, 15, 17, 32])
    def test_wrong_length_raises(self, size):
        with pytest.raises(LengthError):
            decode(bytes(size))

    def test_accepts_bytearray(self):
        record = decode(bytearray(encode(3, 3)))
        assert record.value == 3

    def test_is_value_block(self):
        assert is_value_block(encode(1, 1)) is True
        assert is_value_block(bytes.fromhex("00" * 15)) is False

    def test_to_dict(self):
        result = decode(encode(100, 5)).to_dict()
        assert result["value"] == 100
        assert result["value_inverted"] == "FFFFFF9B"
        assert result["is_valid"] is True
        assert to_hex(encode(100, 5)).endswith("05FA05FA")
