import numpy as np

from .constants import DISPLAY_HEIGHT, DISPLAY_WIDTH


class Framebuffer:
    """64x32 monochrome display, one byte (0 or 1) per pixel, row-major.

    Only ``clear()`` and ``draw_sprite()`` mutate it.  Renderers must go
    through ``snapshot()``, which hands out a copy.
    """

    def __init__(self, width=DISPLAY_WIDTH, height=DISPLAY_HEIGHT):
        self.width = width
        self.height = height
        self.vram = bytearray(width * height)
        self.dirty = True

    def clear(self):
        self.vram[:] = bytes(len(self.vram))
        self.dirty = True

    def pixel(self, x, y):
        return self.vram[x + y * self.width]

    def draw_sprite(self, x, y, rows, clip=False):
        """XOR ``rows`` (one byte per 8-pixel row) into the display.

        The start coordinate always wraps.  Pixels that run off the right or
        bottom edge wrap around too, unless ``clip`` is set, in which case
        they are dropped.  Returns True if any lit pixel was turned off.
        """
        x %= self.width
        y %= self.height
        buf = self.vram
        collision = False
        for row, sprite in enumerate(rows):
            py = y + row
            if py >= self.height:
                if clip:
                    break
                py %= self.height
            if sprite == 0:
                continue
            base = py * self.width
            for bit in range(8):
                if not sprite & (0x80 >> bit):
                    continue
                px = x + bit
                if px >= self.width:
                    if clip:
                        break
                    px %= self.width
                idx = base + px
                if buf[idx]:
                    collision = True
                buf[idx] ^= 1
        self.dirty = True
        return collision

    def snapshot(self):
        """Copy of the display as a (height, width) boolean array."""
        return np.frombuffer(bytes(self.vram), dtype=np.uint8).reshape(self.height, self.width).astype(bool)

    def __str__(self):
        lines = []
        for y in range(self.height):
            row = self.vram[y * self.width:(y + 1) * self.width]
            lines.append("".join("#" if p else "." for p in row))
        return "\n".join(lines)
