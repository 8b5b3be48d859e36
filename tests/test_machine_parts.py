import numpy as np
import pytest

from chip8vm.errors import MemoryOutOfBounds, StackOverflow, StackUnderflow
from chip8vm.framebuffer import Framebuffer
from chip8vm.memory import Memory
from chip8vm.registers import RegisterFile
from chip8vm.timers import TimerUnit


# ---- Memory ----

def test_memory_bounds():
    mem = Memory()
    mem.write(4095, 0x1FF)
    assert mem.read(4095) == 0xFF
    with pytest.raises(MemoryOutOfBounds):
        mem.read(4096)
    with pytest.raises(MemoryOutOfBounds):
        mem.write(-1, 0)
    with pytest.raises(MemoryOutOfBounds):
        mem.read_word(4095)


def test_memory_block_write_is_all_or_nothing():
    mem = Memory()
    with pytest.raises(MemoryOutOfBounds) as exc:
        mem.write_block(4094, b"\x01\x02\x03")
    assert exc.value.address == 4094
    assert exc.value.length == 3
    assert mem.read_block(4094, 2) == b"\x00\x00"


def test_read_word_is_big_endian():
    mem = Memory()
    mem.load_program(b"\xA2\x2A")
    assert mem.read_word(0x200) == 0xA22A


# ---- Registers ----

def test_registers_reset_state():
    regs = RegisterFile()
    assert regs.pc == 0x200
    assert regs.i == 0
    assert list(regs.v) == [0] * 16
    assert regs.stack_depth == 16


def test_registers_reject_untruncated_values():
    regs = RegisterFile()
    with pytest.raises(ValueError):
        regs.v[0] = 0x100


def test_stack_push_pop():
    regs = RegisterFile(stack_depth=2)
    regs.push(0x202)
    regs.push(0x304)
    assert regs.call_stack() == [0x202, 0x304]
    with pytest.raises(StackOverflow):
        regs.push(0x400)
    assert regs.pop() == 0x304
    assert regs.pop() == 0x202
    with pytest.raises(StackUnderflow):
        regs.pop()


def test_vf_alias():
    regs = RegisterFile()
    regs.vf = 1
    assert regs.v[15] == 1


# ---- Timers ----

def test_timer_decay():
    timers = TimerUnit()
    timers.set_delay(5)
    for _ in range(5):
        timers.tick()
    assert timers.get_delay() == 0
    timers.tick()
    assert timers.get_delay() == 0


def test_timers_are_independent():
    timers = TimerUnit()
    timers.set_delay(1)
    timers.set_sound(3)
    timers.tick()
    assert timers.get_delay() == 0
    assert timers.get_sound() == 2
    assert timers.sound_active


def test_timer_clamp():
    timers = TimerUnit()
    timers.set_delay(300)
    timers.set_sound(-4)
    assert timers.get_delay() == 255
    assert timers.get_sound() == 0


# ---- Framebuffer ----

def test_framebuffer_draw_and_erase():
    fb = Framebuffer()
    assert fb.draw_sprite(0, 0, b"\x80") is False
    assert fb.pixel(0, 0) == 1
    assert fb.draw_sprite(0, 0, b"\x80") is True
    assert fb.pixel(0, 0) == 0


def test_framebuffer_no_collision_on_disjoint_sprites():
    fb = Framebuffer()
    fb.draw_sprite(0, 0, b"\xF0")
    assert fb.draw_sprite(4, 0, b"\xF0") is False
    assert fb.snapshot()[0, :8].all()


def test_framebuffer_snapshot_shape():
    fb = Framebuffer()
    snap = fb.snapshot()
    assert snap.shape == (32, 64)
    assert snap.dtype == np.bool_


def test_framebuffer_text_dump():
    fb = Framebuffer(width=4, height=2)
    fb.draw_sprite(1, 1, b"\x80")
    assert str(fb) == "....\n.#.."
