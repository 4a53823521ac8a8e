"""
mifarelab: MIFARE Classic 1K memory and access-control explorer.

FastAPI backend for the protocol walkthrough front-end, providing APIs for:
- Value block encoding/decoding with redundancy checks
- Sector trailer access bits (C1/C2/C3) packing, unpacking and validation
- Data block and sector trailer permission tables
- Card memory maps built from dumps or from the sample card
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from mifarelab.config import HOST, PORT, LOG_LEVEL
from mifarelab.api import access, card, value_blocks
from mifarelab.rfid.memory_map import build_sample_card, sector_info
from mifarelab.rfid.mifare import NUM_SECTORS

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check the sample card decodes cleanly on startup."""
    logger.info("Starting mifarelab...")
    blocks = build_sample_card()
    inconsistent = [s for s in range(NUM_SECTORS) if not sector_info(blocks, s).access.consistent]
    if inconsistent:
        logger.error("Sample card has inconsistent access bits in sectors %s", inconsistent)
    else:
        logger.info("Sample card loaded: %d sectors", NUM_SECTORS)
    yield
    logger.info("Shutting down mifarelab")


app = FastAPI(
    title="mifarelab",
    description="MIFARE Classic 1K memory layout and access conditions",
    version="1.0.0",
    lifespan=lifespan,
)

# Include API routers
app.include_router(value_blocks.router)
app.include_router(access.router)
app.include_router(card.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
