# pyglet front end: the window, the buzzer and the keypad.
# It owns no machine state, it only drives the scheduler and reads the machine back.

import logging

import numpy as np
import pyglet
from pyglet.media import synthesis
from pyglet.window import key

from .errors import Chip8Error
from .scheduler import CycleScheduler

logger = logging.getLogger(__name__)

# map binding keys
#   1 2 3 C        1 2 3 4
#   4 5 6 D   <-   Q W E R
#   7 8 9 E        A S D F
#   A 0 B F        Z X C V
KEYMAP = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}

WHITE = (255, 255, 255, 255)


def generate_beep(duration=0.25, frequency=440, sample_rate=44100):
    wave = synthesis.Sine(duration=duration, frequency=frequency, sample_rate=sample_rate)
    return pyglet.media.StaticSource(wave)


def render_rgba(pixels, scale):
    """(h, w) bool grid -> bottom-up RGBA bytes scaled by ``scale``."""
    height, width = pixels.shape
    small = np.zeros((height, width, 4), dtype=np.uint8)
    small[..., :3] = pixels[..., None] * 255
    small[..., 3] = 255
    # pyglet images start at the bottom row
    small = np.flipud(small)
    if scale != 1:
        small = np.repeat(np.repeat(small, scale, axis=0), scale, axis=1)
    return small.tobytes()


class Chip8Window(pyglet.window.Window):

    def __init__(self, machine, config):
        self.machine = machine
        self.config = config
        self.scale = config.scale
        fb = machine.framebuffer
        super().__init__(
            width=fb.width * self.scale,
            height=fb.height * self.scale,
            caption=config.title,
            resizable=False,
            vsync=False,
        )
        self.scheduler = CycleScheduler.from_config(machine, config)

        self.image = pyglet.image.ImageData(
            self.width, self.height, 'RGBA',
            render_rgba(machine.framebuffer_snapshot(), self.scale))

        # Beep sound, looped while the sound timer is running
        self.beep_player = pyglet.media.Player()
        self.beep_player.queue(generate_beep())
        self.beep_player.loop = True
        self.sound_playing = False

        # Performance tracking
        self._fps_counter = 0
        self._last_cycles = 0
        self.fps_label = pyglet.text.Label(
            "FPS: 0", font_size=12, x=5, y=self.height - 15,
            anchor_x='left', anchor_y='center', color=WHITE)
        self.cps_label = pyglet.text.Label(
            "Cycles/s: 0", font_size=12, x=5, y=self.height - 30,
            anchor_x='left', anchor_y='center', color=WHITE)
        self.show_stats = False
        self._closed = False

        pyglet.clock.schedule(self._update)
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

    # ---- Emulation ----
    def _update(self, dt):
        try:
            self.scheduler.advance(dt)
        except Chip8Error as e:
            logger.error("Emulation error: %s", e)
            self.close()
            return
        self._update_sound()

    def _update_sound(self):
        active = self.machine.sound_active()
        if active and not self.sound_playing:
            self.beep_player.play()
        elif not active and self.sound_playing:
            self.beep_player.pause()
        self.sound_playing = active

    def _update_bench(self, dt):
        cycles = self.scheduler.cycles
        self.cps_label.text = "Cycles/s: %d" % round((cycles - self._last_cycles) / dt)
        self.fps_label.text = "FPS: %.1f" % (self._fps_counter / dt)
        self._last_cycles = cycles
        self._fps_counter = 0

    # ---- Drawing ----
    def on_draw(self):
        self.clear()
        fb = self.machine.framebuffer
        if fb.dirty:
            self.image.set_data('RGBA', self.width * 4,
                                render_rgba(self.machine.framebuffer_snapshot(), self.scale))
            fb.dirty = False
        self.image.blit(0, 0)
        if self.show_stats:
            self.fps_label.draw()
            self.cps_label.draw()
        self._fps_counter += 1

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            # toggle per-instruction tracing
            pkg_logger = logging.getLogger("chip8vm")
            tracing = pkg_logger.getEffectiveLevel() <= logging.DEBUG
            pkg_logger.setLevel(logging.INFO if tracing else logging.DEBUG)
            logger.info("Tracing %s", "off" if tracing else "on")
        elif symbol == key.F2:
            self.show_stats = not self.show_stats
        elif symbol in KEYMAP:
            self.machine.set_key_state(KEYMAP[symbol], True)

    def on_key_release(self, symbol, modifiers):
        if symbol in KEYMAP:
            self.machine.set_key_state(KEYMAP[symbol], False)

    def close(self):
        if self._closed:
            return
        self._closed = True
        pyglet.clock.unschedule(self._update)
        pyglet.clock.unschedule(self._update_bench)
        self.beep_player.delete()
        super().close()


def run(machine, config):
    Chip8Window(machine, config)
    pyglet.app.run()
