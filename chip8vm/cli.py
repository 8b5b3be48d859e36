"""
CHIP-8 emulator command line
=============================

Usage:
  python -m chip8vm ROM [--cpu-hz N] [--scale N] [--preset NAME] [--config FILE]
                        [--seed N] [--unknown-opcode {halt,skip}]
                        [--headless SECONDS] [--log-level LEVEL]
"""

import argparse
import logging
import sys

from .config import PRESETS, UNKNOWN_OPCODE_POLICIES, MachineConfig
from .cpu import Chip8
from .errors import Chip8Error
from .rom import read_rom
from .scheduler import CycleScheduler

logger = logging.getLogger(__name__)

FRAME_TIME = 1.0 / 60


def build_parser():
    parser = argparse.ArgumentParser(
        prog="chip8vm",
        description="CHIP-8 virtual machine",
    )
    parser.add_argument("rom", help="ROM image to run")
    parser.add_argument("--config", metavar="FILE", default=None,
                        help="JSON machine configuration")
    parser.add_argument("--preset", choices=sorted(PRESETS), default=None,
                        help="quirk preset (default: modern)")
    parser.add_argument("--cpu-hz", type=int, default=None, metavar="N",
                        help="instructions per second")
    parser.add_argument("--scale", type=int, default=None, metavar="N",
                        help="window pixels per CHIP-8 pixel")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for the CXNN random generator")
    parser.add_argument("--unknown-opcode", choices=UNKNOWN_OPCODE_POLICIES, default=None,
                        help="what to do with an illegal instruction")
    parser.add_argument("--headless", type=float, default=None, metavar="SECONDS",
                        help="run without a window for SECONDS of emulated time, then print the display")
    parser.add_argument("--log-level", default="WARNING",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"))
    return parser


def build_config(args):
    if args.config:
        config = MachineConfig.load(args.config)
    elif args.preset:
        config = MachineConfig.for_preset(args.preset)
    else:
        config = MachineConfig()
    if args.config and args.preset:
        config.quirks = MachineConfig.for_preset(args.preset).quirks
    if args.cpu_hz is not None:
        config.cpu_hz = args.cpu_hz
    if args.scale is not None:
        config.scale = args.scale
    if args.seed is not None:
        config.seed = args.seed
    if args.unknown_opcode is not None:
        config.unknown_opcode = args.unknown_opcode
    config.validate()
    return config


def run_headless(machine, config, seconds):
    scheduler = CycleScheduler.from_config(machine, config)
    frames = int(seconds / FRAME_TIME)
    for _ in range(frames):
        scheduler.advance(FRAME_TIME)
    return scheduler.cycles


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        config = build_config(args)
    except (OSError, ValueError, TypeError) as e:
        print("Bad configuration: %s" % e, file=sys.stderr)
        return 2

    machine = Chip8(config)
    try:
        machine.load(read_rom(args.rom))
    except (OSError, Chip8Error) as e:
        print("Could not load ROM: %s" % e, file=sys.stderr)
        return 1

    if args.headless is not None:
        try:
            cycles = run_headless(machine, config, args.headless)
        except Chip8Error as e:
            print("Emulation error: %s" % e, file=sys.stderr)
            print(machine.framebuffer)
            return 1
        print(machine.framebuffer)
        logger.info("Ran %d cycles", cycles)
        return 0

    # imported late so headless runs work without a display
    from .frontend import run
    run(machine, config)
    if machine.error is not None:
        return 1
    return 0
