"""CHIP-8 instruction decoding.

Instruction layout (nibble = half a byte)::

    C X Y N     C   - opcode class, first nibble
                X   - second nibble, register index Vx
                Y   - third nibble, register index Vy
                N   - fourth nibble, 4-bit immediate
                NN  - last byte, 8-bit immediate
                NNN - last 12 bits, address

Decoding is pure and never raises: a word that matches no pattern decodes
to ``Op.UNKNOWN`` and the engine decides what to do with it.
"""

import enum
from dataclasses import dataclass
from functools import lru_cache


class Op(enum.Enum):
    CLS = "00E0"
    RET = "00EE"
    SYS = "0NNN"
    JP = "1NNN"
    CALL = "2NNN"
    SE_VX_NN = "3XNN"
    SNE_VX_NN = "4XNN"
    SE_VX_VY = "5XY0"
    LD_VX_NN = "6XNN"
    ADD_VX_NN = "7XNN"
    LD_VX_VY = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD_VX_VY = "8XY4"
    SUB = "8XY5"
    SHR = "8XY6"
    SUBN = "8XY7"
    SHL = "8XYE"
    SNE_VX_VY = "9XY0"
    LD_I = "ANNN"
    JP_V0 = "BNNN"
    RND = "CXNN"
    DRW = "DXYN"
    SKP = "EX9E"
    SKNP = "EXA1"
    LD_VX_DT = "FX07"
    LD_VX_K = "FX0A"
    LD_DT_VX = "FX15"
    LD_ST_VX = "FX18"
    ADD_I_VX = "FX1E"
    LD_F_VX = "FX29"
    LD_B_VX = "FX33"
    LD_I_VX = "FX55"
    LD_VX_I = "FX65"
    UNKNOWN = "????"


# (mask, pattern, op), most specific masks first
OPCODE_TABLE = (
    (0xFFFF, 0x00E0, Op.CLS),
    (0xFFFF, 0x00EE, Op.RET),
    (0xF000, 0x0000, Op.SYS),

    (0xF000, 0x1000, Op.JP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SE_VX_NN),
    (0xF000, 0x4000, Op.SNE_VX_NN),
    (0xF00F, 0x5000, Op.SE_VX_VY),
    (0xF000, 0x6000, Op.LD_VX_NN),
    (0xF000, 0x7000, Op.ADD_VX_NN),

    (0xF00F, 0x8000, Op.LD_VX_VY),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD_VX_VY),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),

    (0xF00F, 0x9000, Op.SNE_VX_VY),
    (0xF000, 0xA000, Op.LD_I),
    (0xF000, 0xB000, Op.JP_V0),
    (0xF000, 0xC000, Op.RND),
    (0xF000, 0xD000, Op.DRW),

    (0xF0FF, 0xE09E, Op.SKP),
    (0xF0FF, 0xE0A1, Op.SKNP),

    (0xF0FF, 0xF007, Op.LD_VX_DT),
    (0xF0FF, 0xF00A, Op.LD_VX_K),
    (0xF0FF, 0xF015, Op.LD_DT_VX),
    (0xF0FF, 0xF018, Op.LD_ST_VX),
    (0xF0FF, 0xF01E, Op.ADD_I_VX),
    (0xF0FF, 0xF029, Op.LD_F_VX),
    (0xF0FF, 0xF033, Op.LD_B_VX),
    (0xF0FF, 0xF055, Op.LD_I_VX),
    (0xF0FF, 0xF065, Op.LD_VX_I),
)


@dataclass(frozen=True)
class Instruction:
    """A decoded 16-bit instruction word with every operand field extracted."""

    raw: int
    op: Op
    kind: int   # first nibble, the opcode class
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    @property
    def known(self):
        return self.op is not Op.UNKNOWN

    def __str__(self):
        return "%04X %s" % (self.raw, self.op.name)


def match(word):
    for mask, pattern, op in OPCODE_TABLE:
        if word & mask == pattern:
            return op
    return Op.UNKNOWN


@lru_cache(maxsize=None)
def decode(word):
    word &= 0xFFFF
    return Instruction(
        raw=word,
        op=match(word),
        kind=(word & 0xF000) >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        nn=word & 0x00FF,
        nnn=word & 0x0FFF,
    )
