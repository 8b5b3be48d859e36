"""Errors raised by the CHIP-8 machine."""


class Chip8Error(Exception):
    """Base for everything the machine can report from ``step()``.

    ``pc`` and ``opcode`` are filled in by the engine once the failing
    instruction is known, so callers can print a diagnostic.
    """

    def __init__(self, message="", pc=None, opcode=None):
        super().__init__(message)
        self.message = message
        self.pc = pc
        self.opcode = opcode

    def __str__(self):
        text = self.message or self.__class__.__name__
        if self.pc is not None:
            text += " at PC=0x%03X" % self.pc
            if self.opcode is not None:
                text += " (opcode 0x%04X)" % self.opcode
        return text


class DecodeError(Chip8Error):
    """Illegal instruction: the word matches no known opcode pattern."""


class StackOverflow(Chip8Error):
    pass


class StackUnderflow(Chip8Error):
    pass


class MemoryOutOfBounds(Chip8Error):
    def __init__(self, address, length=1, message="", pc=None, opcode=None):
        self.address = address
        self.length = length
        if not message:
            if length > 1:
                message = "Memory access out of bounds: 0x%03X..0x%03X" % (address, address + length - 1)
            else:
                message = "Memory access out of bounds: 0x%03X" % address
        super().__init__(message, pc=pc, opcode=opcode)
