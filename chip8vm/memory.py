import logging

from .constants import FONTSET, FONT_OFFSET, MEMORY_SIZE, PROGRAM_OFFSET
from .errors import MemoryOutOfBounds

logger = logging.getLogger(__name__)


class Memory:
    """4 KiB of byte-addressable RAM.

    Every access is bounds checked; nothing wraps.  Multi-byte accesses are
    checked as a whole before anything is written so a failing access leaves
    memory untouched.
    """

    def __init__(self, size=MEMORY_SIZE):
        self.size = size
        self.data = bytearray(size)

    def check(self, address, length=1):
        if address < 0 or length < 0 or address + length > self.size:
            raise MemoryOutOfBounds(address, length)

    def read(self, address):
        self.check(address)
        return self.data[address]

    def write(self, address, value):
        self.check(address)
        self.data[address] = value & 0xFF

    def read_word(self, address):
        # instructions are stored big-endian
        self.check(address, 2)
        return (self.data[address] << 8) | self.data[address + 1]

    def read_block(self, address, length):
        self.check(address, length)
        return bytes(self.data[address:address + length])

    def write_block(self, address, values):
        values = bytes(values)
        self.check(address, len(values))
        self.data[address:address + len(values)] = values

    # ---- Load ----
    def clear(self):
        self.data[:] = bytes(self.size)

    def load_fonts(self, fontset=FONTSET, base=FONT_OFFSET):
        self.write_block(base, fontset)

    def load_program(self, program, offset=PROGRAM_OFFSET):
        program = bytes(program)
        if offset + len(program) > self.size:
            raise MemoryOutOfBounds(
                offset, len(program),
                "Program of %d bytes does not fit (max %d)" % (len(program), self.size - offset))
        self.write_block(offset, program)
        logger.info("Loaded %d program bytes at 0x%03X", len(program), offset)
