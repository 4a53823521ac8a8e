"""
Card dump building: converts 64 blocks to the common output formats.

Supports multiple output formats:
- Raw binary (1024 bytes)
- Hex string
- Base64 string
- Block-by-block hex list
- Proxmark3 text dump
"""

import base64

from .mifare import BYTES_PER_BLOCK, TOTAL_BLOCKS, LengthError, check_length, to_hex


def _checked(blocks: list[bytes]) -> list[bytes]:
    if len(blocks) != TOTAL_BLOCKS:
        raise LengthError("Card dump", TOTAL_BLOCKS, len(blocks), unit="blocks")
    return [check_length(f"Block {i}", b, BYTES_PER_BLOCK) for i, b in enumerate(blocks)]


def build_binary(blocks: list[bytes]) -> bytes:
    """Build a raw 1024-byte binary dump."""
    return b"".join(_checked(blocks))


def build_hex(blocks: list[bytes]) -> str:
    """Build a hex-encoded string (2048 chars)."""
    return to_hex(build_binary(blocks))


def build_base64(blocks: list[bytes]) -> str:
    """Build a base64-encoded string."""
    return base64.b64encode(build_binary(blocks)).decode("ascii")


def build_hex_blocks(blocks: list[bytes]) -> list[str]:
    """Build a list of 64 hex-encoded block strings."""
    return [to_hex(b) for b in _checked(blocks)]


def build_proxmark3_dump(blocks: list[bytes]) -> str:
    """
    Build a Proxmark3-compatible text dump.

    Output format:
    Block 00: AA BB CC DD EE FF 00 11 22 33 44 55 66 77 88 99
    """
    lines = []
    for i, block in enumerate(_checked(blocks)):
        hex_bytes = " ".join(f"{b:02X}" for b in block)
        lines.append(f"Block {i:02d}: {hex_bytes}")
    return "\n".join(lines)
