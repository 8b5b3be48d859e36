# CHIP-8 machine layout
# Memory - 4096 bytes: fonts at the bottom, programs from 0x200 up.
# Display - 64x32 monochrome.
# Keypad - 16 keys, 0x0..0xF.

MEMORY_SIZE = 4096
FONT_OFFSET = 0x000
PROGRAM_OFFSET = 0x200          # load offset, everything below is reserved

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
STACK_DEPTH = 16
NUM_KEYS = 16

CPU_HZ = 500
TIMER_HZ = 60

GLYPH_SIZE = 5

# Standard CHIP-8 fontset (80 bytes), one 5-byte sprite per hex digit
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
