"""
Card dump parsing: converts the common dump formats into a memory map.

Supports multiple input formats:
- Raw binary dump (1024 bytes)
- Hex string dump
- Block-by-block hex list (64 × 16 bytes)
- Base64 string
- Proxmark3 text dump
"""

import base64

from .mifare import (
    BYTES_PER_BLOCK, TOTAL_BLOCKS, TOTAL_BYTES, LengthError, block_to_byte_offset, from_hex,
)
from .memory_map import MemoryBlock, build_memory_map


def split_blocks(data: bytes) -> list[bytes]:
    """Split a raw 1024-byte dump into 64 blocks."""
    if len(data) != TOTAL_BYTES:
        raise LengthError("Card dump", TOTAL_BYTES, len(data))
    offsets = [block_to_byte_offset(i) for i in range(TOTAL_BLOCKS)]
    return [data[o:o + BYTES_PER_BLOCK] for o in offsets]


def parse_from_blocks(blocks: list[bytes]) -> list[MemoryBlock]:
    """Parse from a list of 64 blocks (each 16 bytes)."""
    return build_memory_map(blocks)


def parse_from_binary(data: bytes) -> list[MemoryBlock]:
    """Parse from a raw 1024-byte binary dump."""
    return build_memory_map(split_blocks(data))


def parse_from_hex(hex_string: str) -> list[MemoryBlock]:
    """Parse from a hex-encoded string (2048 hex chars = 1024 bytes)."""
    return parse_from_binary(from_hex(hex_string))


def parse_from_base64(b64_string: str) -> list[MemoryBlock]:
    """Parse from a base64-encoded string."""
    return parse_from_binary(base64.b64decode(b64_string))


def parse_from_hex_blocks(hex_blocks: list[str]) -> list[MemoryBlock]:
    """Parse from a list of 64 hex-encoded block strings."""
    return build_memory_map([from_hex(h) for h in hex_blocks])


def read_proxmark3_blocks(dump_text: str) -> list[bytes]:
    """
    Extract the blocks of a Proxmark3 text dump.

    Expected format (one block per line):
    Block 00: AA BB CC DD EE FF 00 11 22 33 44 55 66 77 88 99
    Block 01: ...
    """
    blocks = []
    for line in dump_text.strip().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if ":" in line:
            hex_part = line.split(":", 1)[1].strip()
        else:
            hex_part = line
        hex_clean = hex_part.replace(" ", "")
        if len(hex_clean) == BYTES_PER_BLOCK * 2:
            blocks.append(bytes.fromhex(hex_clean))

    if len(blocks) != TOTAL_BLOCKS:
        raise ValueError(
            f"Proxmark3 dump should have {TOTAL_BLOCKS} blocks, found {len(blocks)}"
        )
    return blocks


def parse_proxmark3_dump(dump_text: str) -> list[MemoryBlock]:
    """Parse a Proxmark3 text dump."""
    return build_memory_map(read_proxmark3_blocks(dump_text))
