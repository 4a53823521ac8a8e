"""
MIFARE Classic 1K constants, block layouts and shared helpers.

A MIFARE Classic 1K card has:
- 16 sectors (0-15)
- 4 blocks per sector (64 blocks total, numbered 0-63)
- 16 bytes per block (1024 bytes total)
- Block 0: manufacturer data (read-only, contains UID, BCC, SAK, ATQA)
- Every 4th block (3, 7, 11, ...): sector trailer (Key A + access bits + user byte + Key B)
"""

from dataclasses import dataclass
from typing import Optional

# Card geometry
NUM_SECTORS = 16
BLOCKS_PER_SECTOR = 4
BYTES_PER_BLOCK = 16
TOTAL_BLOCKS = NUM_SECTORS * BLOCKS_PER_SECTOR  # 64
TOTAL_BYTES = TOTAL_BLOCKS * BYTES_PER_BLOCK  # 1024

# Sector trailer layout within a 16-byte block
KEY_A_OFFSET = 0
KEY_LENGTH = 6
ACCESS_BITS_OFFSET = 6
ACCESS_BITS_LENGTH = 3
USER_DATA_OFFSET = 9
KEY_B_OFFSET = 10

# Manufacturer block layout (block 0)
UID_LENGTH = 4
BCC_OFFSET = 4
SAK_OFFSET = 5
ATQA_OFFSET = 6
MANUFACTURER_DATA_OFFSET = 8

# Factory defaults
DEFAULT_KEY = bytes([0xFF] * KEY_LENGTH)
DEFAULT_USER_DATA = 0x69


class RangeError(ValueError):
    """An access condition code outside 0..7."""

    def __init__(self, message: str, slot: Optional[int] = None):
        super().__init__(message)
        self.slot = slot


class LengthError(ValueError):
    """A fixed-width field (or block list) with the wrong size."""

    def __init__(self, what: str, expected: int, actual: int, unit: str = "bytes"):
        super().__init__(f"{what} must be {expected} {unit}, got {actual}")
        self.expected = expected
        self.actual = actual


def check_length(what: str, data: bytes, expected: int) -> bytes:
    """Return data as bytes, raising LengthError unless it has the expected size."""
    if len(data) != expected:
        raise LengthError(what, expected, len(data))
    return bytes(data)


def to_hex(data: bytes) -> str:
    """Uppercase hex, two characters per byte, no separators."""
    return bytes(data).hex().upper()


def from_hex(text: str) -> bytes:
    """Parse hex text, ignoring whitespace and case."""
    clean = "".join(text.split())
    return bytes.fromhex(clean)


def sector_to_block(sector: int) -> int:
    """Return the first block number for a given sector."""
    return sector * BLOCKS_PER_SECTOR


def block_to_sector(block: int) -> int:
    """Return the sector number for a given block."""
    return block // BLOCKS_PER_SECTOR


def slot_in_sector(block: int) -> int:
    """Return the access-bits slot (0-3) that governs a block."""
    return block % BLOCKS_PER_SECTOR


def is_sector_trailer(block: int) -> bool:
    """Check if a block number is a sector trailer."""
    return (block + 1) % BLOCKS_PER_SECTOR == 0


def sector_trailer_block(sector: int) -> int:
    """Return the sector trailer block number for a given sector."""
    return sector_to_block(sector) + BLOCKS_PER_SECTOR - 1


def data_blocks_for_sector(sector: int) -> list[int]:
    """Return the data block numbers (non-trailer) for a given sector."""
    first = sector_to_block(sector)
    return [first + i for i in range(BLOCKS_PER_SECTOR - 1)]


def block_to_byte_offset(block: int) -> int:
    """Return the byte offset in a full 1K dump for a given block."""
    return block * BYTES_PER_BLOCK


# ──────────────────────────────────────────────
# Sector trailer
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class SectorTrailer:
    """The fields of a 16-byte sector trailer block."""
    key_a: bytes
    access_bits: bytes
    user_data: int
    key_b: bytes

    def to_dict(self) -> dict:
        return {
            "key_a": to_hex(self.key_a),
            "access_bits": to_hex(self.access_bits),
            "user_data": f"{self.user_data:02X}",
            "key_b": to_hex(self.key_b),
        }


def parse_sector_trailer(data: bytes) -> SectorTrailer:
    """Split a 16-byte sector trailer block into its fields."""
    data = check_length("Sector trailer", data, BYTES_PER_BLOCK)
    return SectorTrailer(
        key_a=data[KEY_A_OFFSET:KEY_A_OFFSET + KEY_LENGTH],
        access_bits=data[ACCESS_BITS_OFFSET:ACCESS_BITS_OFFSET + ACCESS_BITS_LENGTH],
        user_data=data[USER_DATA_OFFSET],
        key_b=data[KEY_B_OFFSET:KEY_B_OFFSET + KEY_LENGTH],
    )


def build_sector_trailer(key_a: bytes, access_bits: bytes, key_b: bytes,
                         user_data: int = DEFAULT_USER_DATA) -> bytes:
    """Assemble a 16-byte sector trailer block."""
    check_length("Key A", key_a, KEY_LENGTH)
    check_length("Access bits", access_bits, ACCESS_BITS_LENGTH)
    check_length("Key B", key_b, KEY_LENGTH)
    return bytes(key_a) + bytes(access_bits) + bytes([user_data & 0xFF]) + bytes(key_b)


# ──────────────────────────────────────────────
# Manufacturer block
# ──────────────────────────────────────────────

def compute_bcc(uid: bytes) -> int:
    """Block check character: XOR of the four UID bytes."""
    bcc = 0
    for b in uid:
        bcc ^= b
    return bcc


@dataclass(frozen=True)
class ManufacturerBlock:
    """The fields of block 0 on a 4-byte-UID card."""
    uid: bytes
    bcc: int
    sak: int
    atqa: bytes
    manufacturer_data: bytes

    @property
    def bcc_valid(self) -> bool:
        return compute_bcc(self.uid) == self.bcc

    def to_dict(self) -> dict:
        return {
            "uid": to_hex(self.uid),
            "bcc": f"{self.bcc:02X}",
            "bcc_valid": self.bcc_valid,
            "sak": f"{self.sak:02X}",
            "atqa": to_hex(self.atqa),
            "manufacturer_data": to_hex(self.manufacturer_data),
        }


def parse_manufacturer_block(data: bytes) -> ManufacturerBlock:
    """Split block 0 into UID, BCC, SAK, ATQA and manufacturer data."""
    data = check_length("Manufacturer block", data, BYTES_PER_BLOCK)
    return ManufacturerBlock(
        uid=data[0:UID_LENGTH],
        bcc=data[BCC_OFFSET],
        sak=data[SAK_OFFSET],
        atqa=data[ATQA_OFFSET:MANUFACTURER_DATA_OFFSET],
        manufacturer_data=data[MANUFACTURER_DATA_OFFSET:],
    )


def build_manufacturer_block(uid: bytes, sak: int = 0x08, atqa: bytes = b"\x04\x00",
                             manufacturer_data: bytes = b"") -> bytes:
    """Assemble block 0 from a 4-byte UID, computing the BCC."""
    check_length("UID", uid, UID_LENGTH)
    check_length("ATQA", atqa, 2)
    tail = bytes(manufacturer_data)[:8].ljust(8, b"\x00")
    return bytes(uid) + bytes([compute_bcc(uid), sak & 0xFF]) + bytes(atqa) + tail
