"""
Card-level view of a MIFARE Classic 1K dump.

Turns 64 raw blocks into ``MemoryBlock`` records whose kind (manufacturer,
data, value, trailer) is derived from the block position and payload, and
resolves each block's permissions through its sector trailer.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from . import access_bits, value_block
from .mifare import (
    BYTES_PER_BLOCK, DEFAULT_KEY, NUM_SECTORS, TOTAL_BLOCKS,
    LengthError, SectorTrailer, block_to_sector, build_manufacturer_block,
    build_sector_trailer, check_length, data_blocks_for_sector, is_sector_trailer,
    parse_manufacturer_block, parse_sector_trailer,
    sector_trailer_block, slot_in_sector, to_hex,
)

logger = logging.getLogger(__name__)


class BlockKind(str, Enum):
    MANUFACTURER = "manufacturer"
    DATA = "data"
    VALUE = "value"
    TRAILER = "trailer"


def block_kind(block: int, raw: bytes = b"") -> BlockKind:
    """Classify a block by position, then by payload for plain data blocks."""
    if is_sector_trailer(block):
        return BlockKind.TRAILER
    if block == 0:
        return BlockKind.MANUFACTURER
    if raw and value_block.is_value_block(raw):
        return BlockKind.VALUE
    return BlockKind.DATA


@dataclass(frozen=True)
class MemoryBlock:
    """One 16-byte block of the card."""
    block: int
    raw: bytes

    def __post_init__(self):
        if not 0 <= self.block < TOTAL_BLOCKS:
            raise ValueError(f"Block number must be 0-{TOTAL_BLOCKS - 1}, got {self.block}")
        object.__setattr__(self, "raw", check_length(f"Block {self.block}", self.raw, BYTES_PER_BLOCK))

    @property
    def sector(self) -> int:
        return block_to_sector(self.block)

    @property
    def kind(self) -> BlockKind:
        return block_kind(self.block, self.raw)

    def to_dict(self) -> dict:
        kind = self.kind
        result = {
            "block": self.block,
            "sector": self.sector,
            "address": f"{self.block:02X}",
            "kind": kind.value,
            "hex": to_hex(self.raw),
        }
        if kind is BlockKind.MANUFACTURER:
            result["manufacturer"] = parse_manufacturer_block(self.raw).to_dict()
        elif kind is BlockKind.VALUE:
            result["value"] = value_block.decode(self.raw).to_dict()
        elif kind is BlockKind.TRAILER:
            trailer = parse_sector_trailer(self.raw)
            result["trailer"] = trailer.to_dict()
            result["access"] = access_bits.decode(trailer.access_bits).to_dict()
        return result


Permissions = Union[access_bits.DataBlockPermissions, access_bits.TrailerPermissions]


@dataclass(frozen=True)
class SectorInfo:
    """A sector's blocks together with its decoded trailer."""
    sector: int
    trailer: SectorTrailer
    access: access_bits.AccessBitsView
    blocks: tuple[MemoryBlock, ...] = ()

    def permissions(self, block: int) -> Permissions:
        """Permissions of a block in this sector, as set by the trailer."""
        if block_to_sector(block) != self.sector:
            raise ValueError(f"Block {block} is not in sector {self.sector}")
        return self.access.permissions(slot_in_sector(block))

    def to_dict(self) -> dict:
        return {
            "sector": self.sector,
            "trailer_block": sector_trailer_block(self.sector),
            "trailer": self.trailer.to_dict(),
            "access": self.access.to_dict(),
            "blocks": [
                {**b.to_dict(), "permissions": self.permissions(b.block).to_dict()}
                for b in self.blocks
            ],
        }


def build_memory_map(blocks: list[bytes]) -> list[MemoryBlock]:
    """Wrap 64 raw blocks as MemoryBlocks."""
    if len(blocks) != TOTAL_BLOCKS:
        raise LengthError("Card dump", TOTAL_BLOCKS, len(blocks), unit="blocks")
    return [MemoryBlock(block=i, raw=b) for i, b in enumerate(blocks)]


def sector_info(blocks: list[bytes], sector: int) -> SectorInfo:
    """Decode one sector of a 64-block card."""
    if not 0 <= sector < NUM_SECTORS:
        raise ValueError(f"Sector must be 0-{NUM_SECTORS - 1}, got {sector}")
    memory = build_memory_map(blocks)
    sector_blocks = tuple(
        memory[b] for b in data_blocks_for_sector(sector) + [sector_trailer_block(sector)]
    )

    trailer = parse_sector_trailer(sector_blocks[-1].raw)
    access = access_bits.decode(trailer.access_bits)
    if not access.consistent:
        bad = [s.slot for s in access.slots if not s.consistent]
        logger.warning(
            "Sector %d has inconsistent access bits %s (slots %s)",
            sector, to_hex(trailer.access_bits), bad,
        )
    return SectorInfo(sector=sector, trailer=trailer, access=access, blocks=sector_blocks)


# ──────────────────────────────────────────────
# Sample card
# ──────────────────────────────────────────────

SAMPLE_UID = bytes.fromhex("DEADBEEF")
SAMPLE_MANUFACTURER_DATA = bytes.fromhex("6263646566676869")

# sector -> (Key A, Key B, access codes for slots 0-3)
SAMPLE_SECTORS = {
    0: ("FFFFFFFFFFFF", "FFFFFFFFFFFF", (4, 4, 4, 0)),
    1: ("A0A1A2A3A4A5", "B0B1B2B3B4B5", (0, 1, 2, 3)),
    2: ("C1C2C3C4C5C6", "C6C7C8C9CACB", (4, 5, 6, 7)),
    3: ("D1D2D3D4D5D6", "D6D7D8D9DADB", (0, 1, 2, 1)),
    4: ("E1E2E3E4E5E6", "E6E7E8E9EAEB", (2, 6, 4, 2)),
    5: ("F1F2F3F4F5F6", "F6F7F8F9FAFB", (0, 0, 0, 0)),
    6: ("010203040506", "060708090A0B", (6, 6, 6, 6)),
    7: ("111213141516", "161718191A1B", (7, 7, 7, 7)),
    8: ("212223242526", "262728292A2B", (2, 1, 4, 2)),
    9: ("313233343536", "363738393A3B", (0, 1, 6, 3)),
    10: ("414243444546", "464748494A4B", (0, 0, 0, 0)),
    11: ("515253545556", "565758595A5B", (2, 4, 5, 4)),
    12: ("FFFFFFFFFFFF", "FFFFFFFFFFFF", (0, 0, 0, 0)),
    13: ("717273747576", "767778797A7B", (7, 7, 7, 7)),
    14: ("FFFFFFFFFFFF", "FFFFFFFFFFFF", (1, 2, 3, 1)),
    15: ("FFFFFFFFFFFF", "FFFFFFFFFFFF", (0, 0, 0, 0)),
}

# block -> value stored as a value block (the address byte is the block number)
SAMPLE_VALUE_BLOCKS = {
    5: 100,
    12: 250,
    13: 500,
    14: 750,
    22: 1000,
    32: 750,
    33: 1250,
}

# block -> raw payload of a plain data block. Payloads the card was
# originally written with at 15 or 17 bytes are padded with 00 or cut
# to 16 bytes (blocks 20, 25, 28, 30, 37, 42, 45, 53, 54).
SAMPLE_DATA_BLOCKS = {
    4: "12345678901234567890123456789012",
    6: "ABCDEFABCDEFABCDEFABCDEFABCDEFAB",
    8: "524541444F4E4C59444154414442434B",
    9: "434F4E4649444D5F434F4E464947555F",
    10: "50524F54454354454452454144444154",
    16: "494D504F5254414E5444415441424C4F",
    17: "434B494E464F524D4154494F4E444154",
    18: "56414C5545424C4F434B434F4E464947",
    20: "4150504C49434154494F4E4441544100",
    21: "434F4E4649475552415449204F4E4441",
    24: "5345435552494459494D504F5254414E",
    25: "434F4E464944454E5449414C44415400",
    26: "50524956415445494E464F524D415449",
    28: "4C4F434B454444415441424C4F434B00",
    29: "504552414E454E544C594C4F434B4544",
    30: "4E4F4143434553534948494649584500",
    34: "56414C5545424C4F434B4D495848454D",
    36: "50554C424943494E464F524D4154494F",
    37: "4C494D49544544414343455353444154",
    38: "50524956415445494E464F524D415449",
    40: "5055424C494353484152454444415441",
    41: "46524545414343455353494E464F524D",
    42: "4F50454E534F5552434549464F524D00",
    44: "454449544142454C524541444F4E4C59",
    45: "524541444F4E4C594146544552575249",
    46: "50524F54454354454452454144444154",
    52: "4C4F434B45444441544142434B313233",
    53: "4E4F41434345535349424C4544415441",
    54: "50455254414E454E544C594C4F434B45",
}


def build_sample_card() -> list[bytes]:
    """
    Build the 64-block demonstration card.

    Every sector uses its own keys and a different mix of access
    conditions; some blocks hold value blocks, others ASCII text or test patterns.
    """
    blocks = [bytes(BYTES_PER_BLOCK) for _ in range(TOTAL_BLOCKS)]
    blocks[0] = build_manufacturer_block(SAMPLE_UID, manufacturer_data=SAMPLE_MANUFACTURER_DATA)

    for blk, value in SAMPLE_VALUE_BLOCKS.items():
        blocks[blk] = value_block.encode(value, blk)

    for blk, data in SAMPLE_DATA_BLOCKS.items():
        blocks[blk] = bytes.fromhex(data)

    for sector, (key_a, key_b, codes) in SAMPLE_SECTORS.items():
        blocks[sector_trailer_block(sector)] = build_sector_trailer(
            key_a=bytes.fromhex(key_a),
            access_bits=access_bits.encode_mixed(*codes),
            key_b=bytes.fromhex(key_b),
        )

    return blocks


def blank_card(uid: bytes = SAMPLE_UID) -> list[bytes]:
    """A factory-fresh card: default keys and transport access bits everywhere."""
    blocks = [bytes(BYTES_PER_BLOCK) for _ in range(TOTAL_BLOCKS)]
    blocks[0] = build_manufacturer_block(uid)
    trailer = build_sector_trailer(DEFAULT_KEY, access_bits.TRANSPORT_ACCESS_BITS, DEFAULT_KEY)
    for sector in range(NUM_SECTORS):
        blocks[sector_trailer_block(sector)] = trailer
    return blocks
