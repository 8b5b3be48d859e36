"""CHIP-8 virtual machine."""

from .config import MachineConfig, Quirks
from .cpu import Chip8
from .decoder import Instruction, Op, decode
from .errors import Chip8Error, DecodeError, MemoryOutOfBounds, StackOverflow, StackUnderflow
from .scheduler import CycleScheduler

__all__ = [
    "Chip8",
    "Chip8Error",
    "CycleScheduler",
    "DecodeError",
    "Instruction",
    "MachineConfig",
    "MemoryOutOfBounds",
    "Op",
    "Quirks",
    "StackOverflow",
    "StackUnderflow",
    "decode",
]

__version__ = "0.1.0"
