"""Machine configuration for the CHIP-8 emulator."""

import json
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Optional

from .constants import CPU_HZ, STACK_DEPTH, TIMER_HZ

UNKNOWN_OPCODE_POLICIES = ("halt", "skip")


@dataclass
class Quirks:
    """Behaviours that differ between historical interpreters."""
    clip_sprites: bool = False                 # drop pixels past the edge instead of wrapping
    vf_reset: bool = False                     # 8XY1/2/3 clear VF
    shift_uses_vy: bool = False                # 8XY6/8XYE shift Vy into Vx
    jump_uses_vx: bool = False                 # BXNN jumps to XNN + Vx
    load_store_increments_index: bool = False  # FX55/FX65 leave I past the block
    index_overflow_flag: bool = True           # FX1E sets VF when I leaves 0x000..0xFFF

    @classmethod
    def from_dict(cls, data):
        names = {f.name for f in fields(cls)}
        unknown = set(data) - names
        if unknown:
            raise ValueError("Unknown quirks: %s" % ", ".join(sorted(unknown)))
        bad = sorted(k for k, v in data.items() if not isinstance(v, bool))
        if bad:
            raise ValueError("Quirks must be true or false: %s" % ", ".join(bad))
        return cls(**data)


PRESETS = {
    "modern": Quirks(),
    "cosmac-vip": Quirks(
        clip_sprites=True,
        vf_reset=True,
        shift_uses_vy=True,
        load_store_increments_index=True,
        index_overflow_flag=False,
    ),
}


@dataclass
class MachineConfig:
    cpu_hz: int = CPU_HZ
    timer_hz: int = TIMER_HZ
    stack_depth: int = STACK_DEPTH
    unknown_opcode: str = "halt"
    seed: Optional[int] = None
    quirks: Quirks = field(default_factory=Quirks)

    # display options, only read by the window
    scale: int = 10
    title: str = "CHIP-8 Emulator"

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.unknown_opcode not in UNKNOWN_OPCODE_POLICIES:
            raise ValueError("unknown_opcode must be one of %s, got %r"
                             % (", ".join(UNKNOWN_OPCODE_POLICIES), self.unknown_opcode))
        if self.cpu_hz <= 0 or self.timer_hz <= 0:
            raise ValueError("cpu_hz and timer_hz must be positive")
        if self.stack_depth <= 0:
            raise ValueError("stack_depth must be positive")
        if self.scale <= 0:
            raise ValueError("scale must be positive")

    @classmethod
    def for_preset(cls, name, **overrides):
        try:
            quirks = PRESETS[name]
        except KeyError:
            raise ValueError("Unknown preset %r (choose from %s)" % (name, ", ".join(PRESETS))) from None
        return cls(quirks=replace(quirks), **overrides)

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        data = dict(data)
        quirks = data.pop("quirks", {})
        preset = data.pop("preset", None)
        base = cls.for_preset(preset) if preset else cls()
        merged = asdict(base.quirks)
        merged.update(quirks)
        return cls(quirks=Quirks.from_dict(merged), **data)

    def save(self, path):
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path):
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            return cls.from_dict(json.load(f))
