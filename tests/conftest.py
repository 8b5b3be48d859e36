import pytest

from chip8vm.config import MachineConfig
from chip8vm.cpu import Chip8


def assemble(*words):
    """Pack 16-bit instruction words into big-endian program bytes."""
    out = bytearray()
    for w in words:
        out += bytes(((w >> 8) & 0xFF, w & 0xFF))
    return bytes(out)


@pytest.fixture
def machine():
    return Chip8(MachineConfig(seed=1234))


@pytest.fixture
def run_program():
    """Load ``words`` into a fresh machine and step ``steps`` times."""
    def _run(*words, steps=None, config=None):
        m = Chip8(config or MachineConfig(seed=1234))
        m.load(assemble(*words))
        m.run(len(words) if steps is None else steps)
        return m
    return _run
