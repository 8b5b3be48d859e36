import logging
import os

from .constants import MEMORY_SIZE, PROGRAM_OFFSET
from .errors import MemoryOutOfBounds

logger = logging.getLogger(__name__)

MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_OFFSET


def read_rom(path):
    """Read a ROM image: two-byte big-endian instructions, loaded verbatim."""
    logger.info("Loading ROM: %s", path)
    with open(path, "rb") as f:
        data = f.read()
    if len(data) > MAX_ROM_SIZE:
        raise MemoryOutOfBounds(
            PROGRAM_OFFSET, len(data),
            "ROM %s is %d bytes, max is %d" % (os.path.basename(path), len(data), MAX_ROM_SIZE))
    if not data:
        logger.warning("ROM %s is empty", path)
    return data
