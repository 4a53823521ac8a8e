"""API routes for whole-card memory maps: sample card, decode, encode."""

import logging

from fastapi import APIRouter, HTTPException, UploadFile, File
from pydantic import BaseModel

from mifarelab.rfid.dump_builder import build_hex, build_hex_blocks, build_proxmark3_dump
from mifarelab.rfid.dump_parser import (
    parse_from_binary, parse_from_blocks, parse_from_hex, parse_proxmark3_dump,
)
from mifarelab.rfid.memory_map import build_sample_card, sector_info
from mifarelab.rfid.mifare import NUM_SECTORS, from_hex

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/card", tags=["card"])


# ──────────────────────────────────────────────
# Request/Response models
# ──────────────────────────────────────────────

class DecodeHexRequest(BaseModel):
    hex_data: str


class DecodeProxmarkRequest(BaseModel):
    dump_text: str


class EncodeCardRequest(BaseModel):
    blocks: list[str]  # 64 hex-encoded blocks


def _memory_map(memory) -> dict:
    return {"blocks": [b.to_dict() for b in memory]}


# ──────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────

@router.get("/sample")
async def sample_card():
    """Memory map of the demonstration card."""
    return _memory_map(parse_from_blocks(build_sample_card()))


@router.get("/sample/sectors/{sector}")
async def sample_sector(sector: int):
    """One sector of the demonstration card with resolved permissions."""
    if not 0 <= sector < NUM_SECTORS:
        raise HTTPException(status_code=404, detail=f"Sector {sector} does not exist")
    return sector_info(build_sample_card(), sector).to_dict()


@router.post("/decode/hex")
async def decode_hex(req: DecodeHexRequest):
    """Decode a hex-encoded 1K dump into a memory map."""
    try:
        return _memory_map(parse_from_hex(req.hex_data))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/decode/proxmark")
async def decode_proxmark(req: DecodeProxmarkRequest):
    """Decode a Proxmark3 text dump into a memory map."""
    try:
        return _memory_map(parse_proxmark3_dump(req.dump_text))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/decode/file")
async def decode_file(file: UploadFile = File(...)):
    """Decode an uploaded binary dump file."""
    data = await file.read()
    logger.info("Decoding uploaded dump %s (%d bytes)", file.filename, len(data))
    try:
        return _memory_map(parse_from_binary(data))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/encode")
async def encode_card(req: EncodeCardRequest):
    """Convert 64 hex blocks into the supported dump formats."""
    try:
        blocks = [from_hex(h) for h in req.blocks]
        return {
            "hex": build_hex(blocks),
            "blocks": build_hex_blocks(blocks),
            "proxmark3": build_proxmark3_dump(blocks),
        }
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
