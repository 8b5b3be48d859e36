"""Fixed-rate cycle scheduler.

Instruction execution and the 60 Hz timers each get their own accumulator.
The host passes in however much wall-clock time has elapsed since the last
call (a render callback, a test, a headless loop); the scheduler turns that
into a whole number of instructions and timer ticks and carries the
remainder forward, so neither cadence depends on how often the host calls.
"""

import logging

from .constants import CPU_HZ, TIMER_HZ
from .errors import Chip8Error

logger = logging.getLogger(__name__)


class CycleScheduler:

    def __init__(self, machine, cpu_hz=CPU_HZ, timer_hz=TIMER_HZ, max_catch_up=0.25):
        if cpu_hz <= 0 or timer_hz <= 0:
            raise ValueError("cpu_hz and timer_hz must be positive")
        self.machine = machine
        self.cpu_period = 1.0 / cpu_hz
        self.timer_period = 1.0 / timer_hz
        self.max_catch_up = max_catch_up

        self._cpu_acc = 0.0
        self._timer_acc = 0.0

        # lifetime counters, read by the window for its cycles/s label
        self.cycles = 0
        self.timer_ticks = 0

    @classmethod
    def from_config(cls, machine, config):
        return cls(machine, cpu_hz=config.cpu_hz, timer_hz=config.timer_hz)

    def reset(self):
        """Drop any banked time, e.g. after the machine has been reloaded."""
        self._cpu_acc = 0.0
        self._timer_acc = 0.0

    def advance(self, elapsed):
        """Account for ``elapsed`` seconds; return instructions executed.

        Instructions and timer ticks run in the order they fall due inside
        the sample, so a tick never lands before an instruction that comes
        earlier in emulated time.  Errors from ``step()`` propagate; the
        machine is left halted, the unspent time is dropped, and later calls
        do nothing until the machine is reloaded.
        """
        if self.machine.halted:
            return 0
        if elapsed < 0:
            raise ValueError("elapsed time cannot be negative")
        if elapsed > self.max_catch_up:
            # host stalled (debugger, window drag); don't try to replay it all
            logger.debug("Clamping %.3fs of elapsed time to %.3fs", elapsed, self.max_catch_up)
            elapsed = self.max_catch_up

        self._cpu_acc += elapsed
        self._timer_acc += elapsed
        executed = 0
        try:
            while True:
                # how long ago each event fell due; the larger one came first
                cpu_over = self._cpu_acc - self.cpu_period
                timer_over = self._timer_acc - self.timer_period
                if timer_over >= 0 and timer_over >= cpu_over:
                    self._timer_acc -= self.timer_period
                    self.machine.tick_timers()
                    self.timer_ticks += 1
                elif cpu_over >= 0:
                    self._cpu_acc -= self.cpu_period
                    self.machine.step()
                    executed += 1
                    self.cycles += 1
                else:
                    break
        except Chip8Error:
            self.reset()
            raise
        return executed
