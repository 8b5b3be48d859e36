import numpy as np

from .constants import FLAG_REGISTER, NUM_REGISTERS, PROGRAM_OFFSET, STACK_DEPTH
from .errors import StackOverflow, StackUnderflow


class RegisterFile:
    """V0..VF, the index register I, the program counter and the call stack.

    The general registers live in a bytearray so a value that was not
    truncated to 8 bits fails loudly instead of being stored.
    """

    def __init__(self, stack_depth=STACK_DEPTH):
        self.v = bytearray(NUM_REGISTERS)
        self.i = 0
        self.pc = PROGRAM_OFFSET
        self.stack = np.zeros(stack_depth, dtype=np.uint16)
        self.sp = 0

    def reset(self, pc=PROGRAM_OFFSET):
        self.v[:] = bytes(NUM_REGISTERS)
        self.i = 0
        self.pc = pc
        self.stack[:] = 0
        self.sp = 0

    @property
    def vf(self):
        return self.v[FLAG_REGISTER]

    @vf.setter
    def vf(self, value):
        self.v[FLAG_REGISTER] = value

    @property
    def stack_depth(self):
        return len(self.stack)

    def push(self, address):
        if self.sp >= len(self.stack):
            raise StackOverflow("Stack overflow (depth %d)" % len(self.stack))
        self.stack[self.sp] = address
        self.sp += 1

    def pop(self):
        if self.sp == 0:
            raise StackUnderflow("Return with empty stack")
        self.sp -= 1
        return int(self.stack[self.sp])

    def call_stack(self):
        """Return addresses currently on the stack, oldest first."""
        return [int(a) for a in self.stack[:self.sp]]
