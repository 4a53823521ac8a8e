"""
MIFARE Classic value block format.

A value block stores a signed 32-bit counter three times (value, inverted
value, value) and a one-byte address four times (addr, ~addr, addr, ~addr):

    bytes  0-3   value            (LE, two's complement)
    bytes  4-7   ~value           (LE)
    bytes  8-11  value backup     (LE)
    byte   12    address
    byte   13    ~address
    byte   14    address backup
    byte   15    ~address backup

A block that breaks any of the redundancy rules is still decoded; the
failed checks are reported in ``ValueBlockRecord.errors``.
"""

import struct
from dataclasses import dataclass

from .mifare import BYTES_PER_BLOCK, check_length, to_hex


@dataclass(frozen=True)
class ValueBlockErrors:
    """Redundancy checks that failed (True means the check did not hold)."""
    value_inverted: bool = False
    value_backup: bool = False
    address_inverted: bool = False
    address_backup: bool = False

    def any(self) -> bool:
        return (self.value_inverted or self.value_backup
                or self.address_inverted or self.address_backup)

    def to_dict(self) -> dict:
        return {
            "value_inverted": self.value_inverted,
            "value_backup": self.value_backup,
            "address_inverted": self.address_inverted,
            "address_backup": self.address_backup,
        }


@dataclass(frozen=True)
class ValueBlockRecord:
    """Decoded view of a 16-byte value block."""
    value: int                      # signed int32
    value_inverted: int             # stored complement, unsigned
    value_backup: int               # signed int32
    address: int
    address_inverted: int
    address_backup: int
    address_inverted_backup: int
    errors: ValueBlockErrors

    @property
    def is_valid(self) -> bool:
        return not self.errors.any()

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "value_inverted": f"{self.value_inverted:08X}",
            "value_backup": self.value_backup,
            "address": self.address,
            "address_inverted": self.address_inverted,
            "address_backup": self.address_backup,
            "address_inverted_backup": self.address_inverted_backup,
            "is_valid": self.is_valid,
            "errors": self.errors.to_dict(),
        }


def encode(value: int, address: int = 0) -> bytes:
    """Build a 16-byte value block. Value wraps mod 2**32, address mod 256."""
    val = value & 0xFFFFFFFF
    inv = ~val & 0xFFFFFFFF
    addr = address & 0xFF
    addr_inv = ~addr & 0xFF
    return struct.pack("<III4B", val, inv, val, addr, addr_inv, addr, addr_inv)


def decode(raw: bytes) -> ValueBlockRecord:
    """Decode a 16-byte value block, reporting (not raising on) corruption."""
    raw = check_length("Value block", raw, BYTES_PER_BLOCK)
    stored, inverted, backup = struct.unpack_from("<III", raw, 0)
    value = struct.unpack_from("<i", raw, 0)[0]
    value_backup = struct.unpack_from("<i", raw, 8)[0]
    addr, addr_inv, addr_bak, addr_inv_bak = raw[12:16]

    errors = ValueBlockErrors(
        value_inverted=(stored ^ inverted) != 0xFFFFFFFF,
        value_backup=stored != backup,
        address_inverted=(addr ^ addr_inv) != 0xFF,
        address_backup=addr != addr_bak or addr_inv != addr_inv_bak,
    )
    return ValueBlockRecord(
        value=value,
        value_inverted=inverted,
        value_backup=value_backup,
        address=addr,
        address_inverted=addr_inv,
        address_backup=addr_bak,
        address_inverted_backup=addr_inv_bak,
        errors=errors,
    )


def is_value_block(raw: bytes) -> bool:
    """True when a 16-byte block satisfies every value block redundancy rule."""
    return len(raw) == BYTES_PER_BLOCK and decode(raw).is_valid


def encode_hex(value: int, address: int = 0) -> str:
    """Hex form of ``encode``."""
    return to_hex(encode(value, address))
