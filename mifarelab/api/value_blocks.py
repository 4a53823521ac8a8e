"""API routes for value block encoding and decoding."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from mifarelab.rfid import value_block
from mifarelab.rfid.mifare import from_hex, to_hex

router = APIRouter(prefix="/api/value-blocks", tags=["value-blocks"])


class EncodeValueRequest(BaseModel):
    value: int
    address: int = 0


class DecodeValueRequest(BaseModel):
    hex: str  # 32 hex chars


@router.post("/encode")
async def encode_value_block(req: EncodeValueRequest):
    """Build a 16-byte value block."""
    raw = value_block.encode(req.value, req.address)
    return {"hex": to_hex(raw), "record": value_block.decode(raw).to_dict()}


@router.post("/decode")
async def decode_value_block(req: DecodeValueRequest):
    """Decode a value block and report which redundancy checks fail."""
    try:
        record = value_block.decode(from_hex(req.hex))
        return record.to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
