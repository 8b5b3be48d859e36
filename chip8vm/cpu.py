# CHIP8 Virtual Machine Steps:
# Input - store key input states and check these per cycle.
# Output - 64x32 display (each pixel on or off) & sound timer for the buzzer.
# CPU - Cowgod's CHIP8 Technical reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
# Memory - 4096 bytes which includes the fonts and the loaded ROM.
#----------------------------------------------------------------------------------------------
# The machine owns all of its state. Nothing in here knows about windows, audio or
# wall-clock time: the scheduler calls step() and tick_timers(), the window reads
# framebuffer_snapshot() and sound_active() and reports keys through set_key_state().

import logging
import random

from .config import MachineConfig
from .constants import FLAG_REGISTER, FONT_OFFSET, GLYPH_SIZE, NUM_KEYS, PROGRAM_OFFSET
from .decoder import Op, decode
from .errors import Chip8Error, DecodeError
from .framebuffer import Framebuffer
from .memory import Memory
from .registers import RegisterFile
from .timers import TimerUnit

logger = logging.getLogger(__name__)


class Chip8:

    def __init__(self, config=None):
        self.config = config or MachineConfig()
        self.quirks = self.config.quirks

        # ---- Machine state ----
        self.memory = Memory()
        self.regs = RegisterFile(self.config.stack_depth)
        self.timers = TimerUnit()
        self.framebuffer = Framebuffer()
        self.keys = bytearray(NUM_KEYS)
        self.random = random.Random(self.config.seed)

        self.waiting_for_key = False
        self._key_event = None
        self.halted = False
        self.error = None
        self.cycles = 0

        self.memory.load_fonts()
        self.setup_dispatch()

    # ---- Opcode dispatch ----
    def setup_dispatch(self):
        self.dispatch = {
            Op.CLS: self.op_CLS,             # 00E0 - Clear the screen
            Op.RET: self.op_RET,             # 00EE - Return from subroutine
            Op.SYS: self.op_SYS,             # 0nnn - Machine code call, ignored
            Op.JP: self.op_JP,               # 1nnn - Jump to nnn
            Op.CALL: self.op_CALL,           # 2nnn - Call subroutine at nnn
            Op.SE_VX_NN: self.op_SE_Vx_nn,   # 3xnn - Skip if Vx == nn
            Op.SNE_VX_NN: self.op_SNE_Vx_nn, # 4xnn - Skip if Vx != nn
            Op.SE_VX_VY: self.op_SE_Vx_Vy,   # 5xy0 - Skip if Vx == Vy
            Op.LD_VX_NN: self.op_LD_Vx_nn,   # 6xnn - Vx = nn
            Op.ADD_VX_NN: self.op_ADD_Vx_nn, # 7xnn - Vx += nn, VF untouched
            Op.LD_VX_VY: self.op_LD_Vx_Vy,   # 8xy0 - Vx = Vy
            Op.OR: self.op_OR,               # 8xy1
            Op.AND: self.op_AND,             # 8xy2
            Op.XOR: self.op_XOR,             # 8xy3
            Op.ADD_VX_VY: self.op_ADD,       # 8xy4 - VF = carry
            Op.SUB: self.op_SUB,             # 8xy5 - VF = not borrow
            Op.SHR: self.op_SHR,             # 8xy6 - VF = bit shifted out
            Op.SUBN: self.op_SUBN,           # 8xy7 - VF = not borrow
            Op.SHL: self.op_SHL,             # 8xyE - VF = bit shifted out
            Op.SNE_VX_VY: self.op_SNE_Vx_Vy, # 9xy0 - Skip if Vx != Vy
            Op.LD_I: self.op_LD_I,           # Annn - I = nnn
            Op.JP_V0: self.op_JP_V0,         # Bnnn - Jump to nnn + V0
            Op.RND: self.op_RND,             # Cxnn - Vx = random & nn
            Op.DRW: self.op_DRW,             # Dxyn - Draw sprite, VF = collision
            Op.SKP: self.op_SKP,             # Ex9E - Skip if key Vx down
            Op.SKNP: self.op_SKNP,           # ExA1 - Skip if key Vx up
            Op.LD_VX_DT: self.op_LD_Vx_DT,   # Fx07
            Op.LD_VX_K: self.op_WAITKEY,     # Fx0A - Wait for a key press
            Op.LD_DT_VX: self.op_LD_DT_Vx,   # Fx15
            Op.LD_ST_VX: self.op_LD_ST_Vx,   # Fx18
            Op.ADD_I_VX: self.op_ADD_I_Vx,   # Fx1E
            Op.LD_F_VX: self.op_FONT,        # Fx29 - I = glyph for digit Vx
            Op.LD_B_VX: self.op_BCD,         # Fx33
            Op.LD_I_VX: self.op_STORE,       # Fx55 - memory[I..] = V0..Vx
            Op.LD_VX_I: self.op_LOAD,        # Fx65 - V0..Vx = memory[I..]
        }
        missing = [op.name for op in Op if op is not Op.UNKNOWN and op not in self.dispatch]
        if missing:
            raise RuntimeError("No handler for: %s" % ", ".join(missing))

    # ---- Load ----
    def reset(self):
        self.memory.clear()
        self.memory.load_fonts()
        self.regs.reset(PROGRAM_OFFSET)
        self.timers.reset()
        self.framebuffer.clear()
        self.keys[:] = bytes(NUM_KEYS)
        self.waiting_for_key = False
        self._key_event = None
        self.halted = False
        self.error = None
        self.cycles = 0

    def load(self, program):
        """Reset the machine and place ``program`` at the load offset."""
        self.reset()
        self.memory.load_program(program, PROGRAM_OFFSET)
        self.regs.pc = PROGRAM_OFFSET

    # ---- Cycle ----
    def fetch(self):
        return self.memory.read_word(self.regs.pc)

    def step(self):
        """Run one fetch-decode-execute cycle and return the instruction.

        Any ``Chip8Error`` leaves the PC on the failing instruction, sets
        ``halted`` and is re-raised with ``pc``/``opcode`` filled in.
        """
        pc = self.regs.pc
        opcode = None
        try:
            opcode = self.fetch()
            ins = decode(opcode)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("%03X: %s", pc, ins)
            self.regs.pc = pc + 2
            handler = self.dispatch.get(ins.op)
            if handler is None:
                self.op_UNKNOWN(ins)
            else:
                handler(ins)
        except Chip8Error as e:
            self.regs.pc = pc
            e.pc = pc
            e.opcode = opcode
            self.halted = True
            self.error = e
            raise
        self.halted = False
        self.error = None
        self.cycles += 1
        return ins

    def run(self, max_steps):
        """Step until ``max_steps`` instructions have run. Mostly for tests."""
        for _ in range(max_steps):
            self.step()

    # ---- Collaborator interface ----
    def tick_timers(self):
        self.timers.tick()

    def framebuffer_snapshot(self):
        return self.framebuffer.snapshot()

    def sound_active(self):
        return self.timers.sound_active

    def set_key_state(self, key, pressed):
        if not 0 <= key < NUM_KEYS:
            raise ValueError("Key index out of range: %r" % (key,))
        was_down = self.keys[key]
        self.keys[key] = 1 if pressed else 0
        if pressed and not was_down and self.waiting_for_key and self._key_event is None:
            self._key_event = key

    def _skip(self):
        self.regs.pc += 2

    # ---- Opcode handlers ----
    def op_UNKNOWN(self, ins):
        if self.config.unknown_opcode == "skip":
            logger.warning("Skipping unknown opcode %04X at %03X", ins.raw, self.regs.pc - 2)
            return
        raise DecodeError("Illegal instruction")

    def op_CLS(self, ins):
        self.framebuffer.clear()

    def op_RET(self, ins):
        self.regs.pc = self.regs.pop()

    def op_SYS(self, ins):
        # 0nnn is ignored on modern interpreters
        logger.debug("SYS call to %03X ignored", ins.nnn)

    def op_JP(self, ins):
        self.regs.pc = ins.nnn

    def op_CALL(self, ins):
        # pc already points past the call, which is the return address
        self.regs.push(self.regs.pc)
        self.regs.pc = ins.nnn

    def op_SE_Vx_nn(self, ins):
        if self.regs.v[ins.x] == ins.nn:
            self._skip()

    def op_SNE_Vx_nn(self, ins):
        if self.regs.v[ins.x] != ins.nn:
            self._skip()

    def op_SE_Vx_Vy(self, ins):
        if self.regs.v[ins.x] == self.regs.v[ins.y]:
            self._skip()

    def op_LD_Vx_nn(self, ins):
        self.regs.v[ins.x] = ins.nn

    def op_ADD_Vx_nn(self, ins):
        self.regs.v[ins.x] = (self.regs.v[ins.x] + ins.nn) & 0xFF

    def op_LD_Vx_Vy(self, ins):
        self.regs.v[ins.x] = self.regs.v[ins.y]

    # VF is always written last so that x == F ends up holding the flag
    def _logic(self, ins, value):
        v = self.regs.v
        v[ins.x] = value
        if self.quirks.vf_reset:
            v[FLAG_REGISTER] = 0

    def op_OR(self, ins):
        v = self.regs.v
        self._logic(ins, v[ins.x] | v[ins.y])

    def op_AND(self, ins):
        v = self.regs.v
        self._logic(ins, v[ins.x] & v[ins.y])

    def op_XOR(self, ins):
        v = self.regs.v
        self._logic(ins, v[ins.x] ^ v[ins.y])

    def op_ADD(self, ins):
        v = self.regs.v
        total = v[ins.x] + v[ins.y]
        v[ins.x] = total & 0xFF
        v[FLAG_REGISTER] = 1 if total > 0xFF else 0

    def op_SUB(self, ins):
        v = self.regs.v
        vx, vy = v[ins.x], v[ins.y]
        v[ins.x] = (vx - vy) & 0xFF
        v[FLAG_REGISTER] = 1 if vx >= vy else 0

    def op_SUBN(self, ins):
        v = self.regs.v
        vx, vy = v[ins.x], v[ins.y]
        v[ins.x] = (vy - vx) & 0xFF
        v[FLAG_REGISTER] = 1 if vy >= vx else 0

    def op_SHR(self, ins):
        v = self.regs.v
        src = v[ins.y] if self.quirks.shift_uses_vy else v[ins.x]
        v[ins.x] = src >> 1
        v[FLAG_REGISTER] = src & 1

    def op_SHL(self, ins):
        v = self.regs.v
        src = v[ins.y] if self.quirks.shift_uses_vy else v[ins.x]
        v[ins.x] = (src << 1) & 0xFF
        v[FLAG_REGISTER] = (src >> 7) & 1

    def op_SNE_Vx_Vy(self, ins):
        if self.regs.v[ins.x] != self.regs.v[ins.y]:
            self._skip()

    def op_LD_I(self, ins):
        self.regs.i = ins.nnn

    def op_JP_V0(self, ins):
        offset = self.regs.v[ins.x] if self.quirks.jump_uses_vx else self.regs.v[0]
        self.regs.pc = ins.nnn + offset

    def op_RND(self, ins):
        self.regs.v[ins.x] = self.random.getrandbits(8) & ins.nn

    def op_DRW(self, ins):
        rows = self.memory.read_block(self.regs.i, ins.n)
        collision = self.framebuffer.draw_sprite(
            self.regs.v[ins.x], self.regs.v[ins.y], rows, clip=self.quirks.clip_sprites)
        self.regs.v[FLAG_REGISTER] = 1 if collision else 0

    def op_SKP(self, ins):
        if self.keys[self.regs.v[ins.x] & 0xF]:
            self._skip()

    def op_SKNP(self, ins):
        if not self.keys[self.regs.v[ins.x] & 0xF]:
            self._skip()

    def op_LD_Vx_DT(self, ins):
        self.regs.v[ins.x] = self.timers.get_delay()

    def op_WAITKEY(self, ins):
        # Only a press that happens while waiting counts; a key that is already
        # held when the wait starts has to be released and pressed again.
        if not self.waiting_for_key:
            self.waiting_for_key = True
            self._key_event = None
        if self._key_event is None:
            self.regs.pc -= 2  # stall, re-execute this instruction next cycle
            return
        self.regs.v[ins.x] = self._key_event
        self._key_event = None
        self.waiting_for_key = False

    def op_LD_DT_Vx(self, ins):
        self.timers.set_delay(self.regs.v[ins.x])

    def op_LD_ST_Vx(self, ins):
        self.timers.set_sound(self.regs.v[ins.x])

    def op_ADD_I_Vx(self, ins):
        total = self.regs.i + self.regs.v[ins.x]
        self.regs.i = total & 0xFFFF
        if self.quirks.index_overflow_flag:
            self.regs.v[FLAG_REGISTER] = 1 if total > 0xFFF else 0

    def op_FONT(self, ins):
        self.regs.i = FONT_OFFSET + (self.regs.v[ins.x] & 0xF) * GLYPH_SIZE

    def op_BCD(self, ins):
        val = self.regs.v[ins.x]
        self.memory.write_block(self.regs.i, (val // 100, (val // 10) % 10, val % 10))

    def op_STORE(self, ins):
        self.memory.write_block(self.regs.i, self.regs.v[:ins.x + 1])
        if self.quirks.load_store_increments_index:
            self.regs.i = (self.regs.i + ins.x + 1) & 0xFFFF

    def op_LOAD(self, ins):
        self.regs.v[:ins.x + 1] = self.memory.read_block(self.regs.i, ins.x + 1)
        if self.quirks.load_store_increments_index:
            self.regs.i = (self.regs.i + ins.x + 1) & 0xFFFF
