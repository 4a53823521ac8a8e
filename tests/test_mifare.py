"""Tests for MIFARE Classic 1K structure helpers."""

import pytest
from mifarelab.rfid.mifare import (
    sector_to_block, block_to_sector, is_sector_trailer, slot_in_sector,
    sector_trailer_block, data_blocks_for_sector,
    block_to_byte_offset, parse_sector_trailer, build_sector_trailer,
    parse_manufacturer_block, build_manufacturer_block, compute_bcc,
    to_hex, from_hex, LengthError, NUM_SECTORS, BLOCKS_PER_SECTOR,
    TOTAL_BLOCKS, TOTAL_BYTES, DEFAULT_KEY, DEFAULT_USER_DATA,
)


class TestMifareConstants:
    def test_geometry(self):
        assert NUM_SECTORS == 16
        assert BLOCKS_PER_SECTOR == 4
        assert TOTAL_BLOCKS == 64
        assert TOTAL_BYTES == 1024


class TestBlockSectorMapping:
    def test_sector_to_block(self):
        assert sector_to_block(0) == 0
        assert sector_to_block(1) == 4
        assert sector_to_block(15) == 60

    def test_block_to_sector(self):
        assert block_to_sector(0) == 0
        assert block_to_sector(3) == 0
        assert block_to_sector(4) == 1
        assert block_to_sector(63) == 15

    def test_is_sector_trailer(self):
        # Sector trailers at blocks 3, 7, 11, ..., 63
        assert is_sector_trailer(3) is True
        assert is_sector_trailer(7) is True
        assert is_sector_trailer(63) is True
        # Non-trailers
        assert is_sector_trailer(0) is False
        assert is_sector_trailer(1) is False
        assert is_sector_trailer(4) is False

    def test_slot_in_sector(self):
        assert slot_in_sector(0) == 0
        assert slot_in_sector(6) == 2
        assert slot_in_sector(7) == 3
        assert slot_in_sector(60) == 0

    def test_sector_trailer_block(self):
        assert sector_trailer_block(0) == 3
        assert sector_trailer_block(1) == 7
        assert sector_trailer_block(15) == 63

    def test_data_blocks_for_sector(self):
        assert data_blocks_for_sector(0) == [0, 1, 2]
        assert data_blocks_for_sector(1) == [4, 5, 6]
        assert data_blocks_for_sector(15) == [60, 61, 62]

    def test_block_to_byte_offset(self):
        assert block_to_byte_offset(0) == 0
        assert block_to_byte_offset(63) == 1008


class TestHexHelpers:
    def test_to_hex_uppercase_no_separators(self):
        assert to_hex(bytes([0xFF, 0x07, 0x80])) == "FF0780"

    def test_from_hex_ignores_whitespace_and_case(self):
        assert from_hex("ff 07\n80") == bytes([0xFF, 0x07, 0x80])

    def test_from_hex_rejects_garbage(self):
        with pytest.raises(ValueError):
            from_hex("ZZ")


class TestSectorTrailer:
    def test_parse_fields(self):
        # Key A (6 bytes) + access bits (3 bytes) + user byte + Key B (6 bytes)
        data = bytes(range(16))
        trailer = parse_sector_trailer(data)
        assert trailer.key_a == bytes([0, 1, 2, 3, 4, 5])
        assert trailer.access_bits == bytes([6, 7, 8])
        assert trailer.user_data == 9
        assert trailer.key_b == bytes([10, 11, 12, 13, 14, 15])

    def test_build_factory_trailer(self):
        raw = build_sector_trailer(DEFAULT_KEY, bytes.fromhex("FF0780"), DEFAULT_KEY)
        assert to_hex(raw) == "FFFFFFFFFFFFFF078069FFFFFFFFFFFF"
        assert parse_sector_trailer(raw).user_data == DEFAULT_USER_DATA == 0x69

    def test_build_then_parse(self):
        raw = build_sector_trailer(bytes.fromhex("A0A1A2A3A4A5"), bytes.fromhex("3F05AC"),
                                   bytes.fromhex("B0B1B2B3B4B5"), user_data=0x00)
        trailer = parse_sector_trailer(raw)
        assert trailer.key_a == bytes.fromhex("A0A1A2A3A4A5")
        assert trailer.access_bits == bytes.fromhex("3F05AC")
        assert trailer.user_data == 0
        assert trailer.key_b == bytes.fromhex("B0B1B2B3B4B5")

    def test_invalid_length_raises(self):
        with pytest.raises(LengthError):
            parse_sector_trailer(bytes(10))

    def test_short_key_raises(self):
        with pytest.raises(LengthError) as exc:
            build_sector_trailer(bytes(5), bytes(3), bytes(6))
        assert exc.value.expected == 6
        assert exc.value.actual == 5

    def test_length_error_is_value_error(self):
        with pytest.raises(ValueError):
            build_sector_trailer(bytes(6), bytes(4), bytes(6))


class TestManufacturerBlock:
    def test_bcc(self):
        assert compute_bcc(bytes.fromhex("DEADBEEF")) == 0x22

    def test_parse_fields(self):
        block = parse_manufacturer_block(bytes.fromhex("DEADBEEF220804006263646566676869"))
        assert block.uid == bytes.fromhex("DEADBEEF")
        assert block.bcc == 0x22
        assert block.bcc_valid is True
        assert block.sak == 0x08
        assert block.atqa == bytes.fromhex("0400")
        assert block.manufacturer_data == bytes.fromhex("6263646566676869")

    def test_build_matches_known_block(self):
        raw = build_manufacturer_block(bytes.fromhex("DEADBEEF"),
                                       manufacturer_data=bytes.fromhex("6263646566676869"))
        assert to_hex(raw) == "DEADBEEF220804006263646566676869"

    def test_bad_bcc_reported(self):
        block = parse_manufacturer_block(bytes.fromhex("DEADBEEF230804006263646566676869"))
        assert block.bcc_valid is False
        assert block.to_dict()["bcc_valid"] is False
