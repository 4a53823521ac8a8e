"""
MIFARE Classic access conditions: access-bit packing and permission tables.

Each block of a sector is governed by three bits C1, C2, C3 (a code 0-7,
C1 being the most significant bit). The four codes of a sector (slots 0-2
for the data blocks, slot 3 for the trailer) are stored in trailer bytes
6-8 together with their complements:

    byte 6:  ~C2_3 ~C2_2 ~C2_1 ~C2_0 | ~C1_3 ~C1_2 ~C1_1 ~C1_0
    byte 7:   C1_3  C1_2  C1_1  C1_0 | ~C3_3 ~C3_2 ~C3_1 ~C3_0
    byte 8:   C3_3  C3_2  C3_1  C3_0 |  C2_3  C2_2  C2_1  C2_0

Reference: NXP MF1S50yyX/V1 datasheet, section 8.7 (Tables 6 and 7).
"""

from dataclasses import dataclass
from enum import Enum

from .mifare import ACCESS_BITS_LENGTH, BLOCKS_PER_SECTOR, RangeError, check_length, to_hex

TRAILER_SLOT = BLOCKS_PER_SECTOR - 1

# Factory configuration: data blocks 000, trailer 001
TRANSPORT_ACCESS_BITS = bytes([0xFF, 0x07, 0x80])


class Access(str, Enum):
    KEY_A = "Key A"
    KEY_B = "Key B"
    KEY_A_OR_B = "Key A|B"
    PUBLIC = "Public"
    FORBIDDEN = "Forbidden"


_A = Access.KEY_A
_B = Access.KEY_B
_AB = Access.KEY_A_OR_B
_NO = Access.FORBIDDEN


@dataclass(frozen=True)
class DataBlockPermissions:
    read: Access
    write: Access
    increment: Access
    decrement: Access

    def to_dict(self) -> dict:
        return {
            "read": self.read.value,
            "write": self.write.value,
            "increment": self.increment.value,
            "decrement": self.decrement.value,
        }


@dataclass(frozen=True)
class KeyPermissions:
    read: Access
    write: Access

    def to_dict(self) -> dict:
        return {"read": self.read.value, "write": self.write.value}


@dataclass(frozen=True)
class TrailerPermissions:
    key_a: KeyPermissions
    access_bits: KeyPermissions
    key_b: KeyPermissions

    @property
    def key_b_readable(self) -> bool:
        """A readable Key B is plain data and cannot be used to authenticate."""
        return self.key_b.read is not Access.FORBIDDEN

    def to_dict(self) -> dict:
        return {
            "key_a": self.key_a.to_dict(),
            "access_bits": self.access_bits.to_dict(),
            "key_b": self.key_b.to_dict(),
        }


# Table 6: access conditions for data blocks, indexed by C1C2C3
DATA_BLOCK_TABLE: dict[int, DataBlockPermissions] = {
    0b000: DataBlockPermissions(read=_AB, write=_AB, increment=_AB, decrement=_AB),
    0b001: DataBlockPermissions(read=_AB, write=_NO, increment=_NO, decrement=_AB),
    0b010: DataBlockPermissions(read=_AB, write=_NO, increment=_NO, decrement=_NO),
    0b011: DataBlockPermissions(read=_B, write=_B, increment=_NO, decrement=_NO),
    0b100: DataBlockPermissions(read=_AB, write=_B, increment=_NO, decrement=_NO),
    0b101: DataBlockPermissions(read=_B, write=_NO, increment=_NO, decrement=_NO),
    0b110: DataBlockPermissions(read=_AB, write=_B, increment=_B, decrement=_AB),
    0b111: DataBlockPermissions(read=_NO, write=_NO, increment=_NO, decrement=_NO),
}


def _trailer(key_a_write, bits_read, bits_write, key_b_read, key_b_write) -> TrailerPermissions:
    # Key A is never readable
    return TrailerPermissions(
        key_a=KeyPermissions(read=_NO, write=key_a_write),
        access_bits=KeyPermissions(read=bits_read, write=bits_write),
        key_b=KeyPermissions(read=key_b_read, write=key_b_write),
    )


# Table 7: access conditions for the sector trailer, indexed by C1C2C3
TRAILER_TABLE: dict[int, TrailerPermissions] = {
    0b000: _trailer(_A, _A, _NO, _A, _A),
    0b001: _trailer(_A, _A, _A, _A, _A),
    0b010: _trailer(_NO, _A, _NO, _A, _NO),
    0b011: _trailer(_B, _AB, _B, _NO, _B),
    0b100: _trailer(_B, _AB, _NO, _NO, _B),
    0b101: _trailer(_NO, _AB, _B, _NO, _NO),
    0b110: _trailer(_NO, _AB, _NO, _NO, _NO),
    0b111: _trailer(_NO, _AB, _NO, _NO, _NO),
}

DATA_BLOCK_DESCRIPTIONS = {
    0b000: "Fully open: Key A or B may read, write, increment and decrement",
    0b001: "Value block, decrement only",
    0b010: "Read-only",
    0b011: "Key B only, read and write",
    0b100: "Readable with either key, writable with Key B",
    0b101: "Read-only with Key B",
    0b110: "Value block, Key B may write and increment, either key may decrement",
    0b111: "Locked",
}

TRAILER_DESCRIPTIONS = {
    0b000: "Key A writes keys; access bits locked",
    0b001: "Transport configuration: Key A controls keys and access bits",
    0b010: "Keys and access bits frozen",
    0b011: "Key B writes keys and access bits",
    0b100: "Key B writes keys; access bits locked",
    0b101: "Keys frozen; Key B writes access bits",
    0b110: "Keys and access bits frozen",
    0b111: "Keys and access bits frozen",
}

# Named presets applying one code to every slot of a sector
ACCESS_MODES = {
    "default": 0b000,
    "editable": 0b001,
    "readonly": 0b010,
    "keyb_write": 0b011,
    "keyb_control": 0b100,
    "locked_keyb": 0b101,
    "fully_locked": 0b110,
    "permanent_lock": 0b111,
}


def check_code(code, slot=None) -> int:
    """Validate an access condition code (0-7)."""
    if isinstance(code, bool) or not isinstance(code, int) or not 0 <= code <= 7:
        where = f" for slot {slot}" if slot is not None else ""
        raise RangeError(f"Access condition code{where} must be an integer 0-7, got {code!r}", slot=slot)
    return code


def code_to_bits(code: int) -> tuple[int, int, int]:
    """Split a code into (C1, C2, C3)."""
    check_code(code)
    return (code >> 2) & 1, (code >> 1) & 1, code & 1


def code_from_bits(c1: int, c2: int, c3: int) -> int:
    """Combine C1, C2, C3 into a code."""
    return ((c1 & 1) << 2) | ((c2 & 1) << 1) | (c3 & 1)


def encode_mixed(slot0: int, slot1: int, slot2: int, slot3: int) -> bytes:
    """Pack one access code per slot into the 3 access-bit bytes."""
    codes = [check_code(c, slot) for slot, c in enumerate((slot0, slot1, slot2, slot3))]

    c1 = c2 = c3 = 0
    for slot, code in enumerate(codes):
        b1, b2, b3 = code_to_bits(code)
        c1 |= b1 << slot
        c2 |= b2 << slot
        c3 |= b3 << slot

    byte6 = ((~c2 & 0x0F) << 4) | (~c1 & 0x0F)
    byte7 = (c1 << 4) | (~c3 & 0x0F)
    byte8 = (c3 << 4) | c2
    return bytes([byte6, byte7, byte8])


def encode_uniform(code: int) -> bytes:
    """Pack the same access code for all four slots."""
    check_code(code)
    return encode_mixed(code, code, code, code)


def encode_mode(name: str) -> bytes:
    """Access bits of a named preset from ACCESS_MODES."""
    if name not in ACCESS_MODES:
        raise ValueError(f"Unknown access mode {name!r}, expected one of {sorted(ACCESS_MODES)}")
    return encode_uniform(ACCESS_MODES[name])


@dataclass(frozen=True)
class SlotBits:
    """C1/C2/C3 of one slot plus the result of its complement check."""
    slot: int
    c1: int
    c2: int
    c3: int
    mismatches: tuple[str, ...] = ()

    @property
    def code(self) -> int:
        return code_from_bits(self.c1, self.c2, self.c3)

    @property
    def consistent(self) -> bool:
        return not self.mismatches

    @property
    def is_trailer(self) -> bool:
        return self.slot == TRAILER_SLOT

    def to_dict(self) -> dict:
        return {
            "slot": self.slot,
            "c1": self.c1,
            "c2": self.c2,
            "c3": self.c3,
            "code": self.code,
            "bits": f"{self.code:03b}",
            "consistent": self.consistent,
            "mismatches": list(self.mismatches),
        }


@dataclass(frozen=True)
class AccessBitsView:
    """Decoded access bits of one sector trailer."""
    raw: bytes
    slots: tuple[SlotBits, ...] = ()

    @property
    def consistent(self) -> bool:
        return all(s.consistent for s in self.slots)

    @property
    def codes(self) -> tuple[int, ...]:
        return tuple(s.code for s in self.slots)

    def permissions(self, slot: int):
        """Resolve a slot's code through Table 6 (slots 0-2) or Table 7 (slot 3)."""
        if not 0 <= slot < len(self.slots):
            raise ValueError(f"Slot must be 0-{BLOCKS_PER_SECTOR - 1}, got {slot}")
        bits = self.slots[slot]
        if bits.is_trailer:
            return describe_trailer(bits.code)
        return describe_data_block(bits.code)

    def to_dict(self) -> dict:
        slots = []
        for s in self.slots:
            entry = s.to_dict()
            entry["permissions"] = self.permissions(s.slot).to_dict()
            if s.is_trailer:
                entry["description"] = TRAILER_DESCRIPTIONS[s.code]
            else:
                entry["description"] = DATA_BLOCK_DESCRIPTIONS[s.code]
            slots.append(entry)
        return {
            "hex": to_hex(self.raw),
            "consistent": self.consistent,
            "codes": list(self.codes),
            "slots": slots,
        }


def decode(raw: bytes) -> AccessBitsView:
    """
    Unpack 3 access-bit bytes into four (C1, C2, C3) triples.

    Any 3 bytes decode; a slot whose stored complements disagree with its
    C bits is reported through ``SlotBits.mismatches``.
    """
    byte6, byte7, byte8 = check_length("Access bits", raw, ACCESS_BITS_LENGTH)

    slots = []
    for n in range(BLOCKS_PER_SECTOR):
        c1 = (byte7 >> (4 + n)) & 1
        c2 = (byte8 >> n) & 1
        c3 = (byte8 >> (4 + n)) & 1
        not_c1 = (byte6 >> n) & 1
        not_c2 = (byte6 >> (4 + n)) & 1
        not_c3 = (byte7 >> n) & 1

        mismatches = tuple(
            name for name, bit, inverted in (("C1", c1, not_c1), ("C2", c2, not_c2), ("C3", c3, not_c3))
            if bit == inverted
        )
        slots.append(SlotBits(slot=n, c1=c1, c2=c2, c3=c3, mismatches=mismatches))

    return AccessBitsView(raw=bytes(raw), slots=tuple(slots))


def describe_data_block(code: int) -> DataBlockPermissions:
    """Table 6 lookup."""
    return DATA_BLOCK_TABLE[check_code(code)]


def describe_trailer(code: int) -> TrailerPermissions:
    """Table 7 lookup."""
    return TRAILER_TABLE[check_code(code)]
