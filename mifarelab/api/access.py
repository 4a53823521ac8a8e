"""API routes for sector trailer access bits and permission tables."""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from mifarelab.rfid import access_bits
from mifarelab.rfid.mifare import from_hex, to_hex

router = APIRouter(prefix="/api/access-bits", tags=["access-bits"])


class EncodeAccessRequest(BaseModel):
    codes: Optional[list[int]] = None  # one code per slot, slots 0-3
    code: Optional[int] = None         # same code for every slot


class DecodeAccessRequest(BaseModel):
    hex: str  # 6 hex chars, trailer bytes 6-8


@router.post("/encode")
async def encode_access_bits(req: EncodeAccessRequest):
    """Pack access condition codes into the 3 access-bit bytes."""
    try:
        if req.codes is not None:
            if len(req.codes) != 4:
                raise ValueError(f"Expected 4 codes (slots 0-3), got {len(req.codes)}")
            raw = access_bits.encode_mixed(*req.codes)
        elif req.code is not None:
            raw = access_bits.encode_uniform(req.code)
        else:
            raise ValueError("Provide either 'codes' or 'code'")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"hex": to_hex(raw), "access": access_bits.decode(raw).to_dict()}


@router.post("/decode")
async def decode_access_bits(req: DecodeAccessRequest):
    """Unpack access bits, reporting complement mismatches per slot."""
    try:
        view = access_bits.decode(from_hex(req.hex))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return view.to_dict()


@router.get("/tables")
async def permission_tables():
    """Both permission tables, keyed by code."""
    return {
        "data_block": {
            str(code): {**perms.to_dict(), "description": access_bits.DATA_BLOCK_DESCRIPTIONS[code]}
            for code, perms in access_bits.DATA_BLOCK_TABLE.items()
        },
        "trailer": {
            str(code): {**perms.to_dict(), "description": access_bits.TRAILER_DESCRIPTIONS[code]}
            for code, perms in access_bits.TRAILER_TABLE.items()
        },
        "modes": {
            name: {"code": code, "hex": to_hex(access_bits.encode_uniform(code))}
            for name, code in access_bits.ACCESS_MODES.items()
        },
    }


@router.get("/data-block/{code}")
async def data_block_permissions(code: int):
    try:
        perms = access_bits.describe_data_block(code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"code": code, "bits": f"{code:03b}", **perms.to_dict()}


@router.get("/trailer/{code}")
async def trailer_permissions(code: int):
    try:
        perms = access_bits.describe_trailer(code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"code": code, "bits": f"{code:03b}", **perms.to_dict()}


@router.get("/modes/{name}")
async def access_mode(name: str):
    """Access bits and decoded permissions of a named preset."""
    try:
        raw = access_bits.encode_mode(name)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"name": name, "hex": to_hex(raw), "access": access_bits.decode(raw).to_dict()}
