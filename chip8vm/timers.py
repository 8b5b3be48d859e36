class TimerUnit:
    """Delay and sound timers.

    Both count down by one per ``tick()`` and hold at zero.  Only the
    scheduler is expected to call ``tick()``; instructions use the setters.
    """

    def __init__(self):
        self.delay = 0
        self.sound = 0

    @staticmethod
    def _clamp(value):
        return max(0, min(0xFF, int(value)))

    def tick(self):
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1

    def set_delay(self, value):
        self.delay = self._clamp(value)

    def set_sound(self, value):
        self.sound = self._clamp(value)

    def get_delay(self):
        return self.delay

    def get_sound(self):
        return self.sound

    @property
    def sound_active(self):
        return self.sound > 0

    def reset(self):
        self.delay = 0
        self.sound = 0
