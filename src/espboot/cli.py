"""Command-line interface.

Usage:
    espboot assemble EXECUTABLE OUTPUT_DIR
    espboot launch MEDIUM_DIR [FIRMWARE_CODE] [FIRMWARE_VARS] [--headless] ...
    espboot run EXECUTABLE [FIRMWARE_CODE] [FIRMWARE_VARS] [--headless] ...
"""

from __future__ import annotations

import argparse
import signal
import sys
import tempfile
from collections.abc import Sequence
from pathlib import Path

from espboot.assembler import assemble
from espboot.config import resolve_firmware
from espboot.emulator import QemuEmulator
from espboot.errors import EspBootError
from espboot.launcher import launch
from espboot.models import ARCHITECTURES, DEFAULT_ARCH, LaunchOptions
from espboot.observability import StructuredLogger

EXIT_ERROR = 1
EXIT_TIMEOUT = 124
EXIT_INTERRUPTED = 130


def cmd_assemble(args: argparse.Namespace, logger: StructuredLogger) -> int:
    medium = assemble(args.executable, args.output_dir, arch=args.arch, logger=logger)
    print(f"Assembled {medium.boot_file}")
    return 0


def cmd_launch(args: argparse.Namespace, logger: StructuredLogger) -> int:
    return _boot(Path(args.medium_dir), args, logger, arch=args.arch or DEFAULT_ARCH)


def cmd_run(args: argparse.Namespace, logger: StructuredLogger) -> int:
    with tempfile.TemporaryDirectory(prefix="espboot-medium-") as medium_dir:
        medium = assemble(args.executable, medium_dir, arch=args.arch, logger=logger)
        return _boot(medium.root, args, logger, arch=medium.arch)


def _boot(
    medium_root: Path,
    args: argparse.Namespace,
    logger: StructuredLogger,
    *,
    arch: str,
) -> int:
    firmware = resolve_firmware(args.firmware_code, args.firmware_vars)
    options = LaunchOptions(
        memory_size=args.memory,
        display_mode="headless" if args.headless else "interactive",
    )
    emulator = QemuEmulator(binary=args.qemu) if args.qemu else None
    result = launch(
        medium_root,
        firmware.code,
        firmware.vars,
        options,
        arch=arch,
        emulator=emulator,
        timeout=args.timeout,
        logger=logger,
    )
    if result.timed_out:
        print(f"Emulator stopped after {args.timeout}s", file=sys.stderr)
        return EXIT_TIMEOUT
    return result.returncode if result.returncode is not None else EXIT_ERROR


def _add_launch_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("firmware_code", nargs="?", help="OVMF code image (default: discovered)")
    parser.add_argument("firmware_vars", nargs="?", help="OVMF vars image (default: discovered)")
    parser.add_argument("--memory", help="Guest RAM, e.g. 512M or 2G")
    parser.add_argument("--headless", action="store_true", help="No display; serial on stdio")
    parser.add_argument("--timeout", type=float, help="Kill the emulator after SECONDS")
    parser.add_argument("--qemu", help="Emulator binary (default: $ESPBOOT_QEMU or PATH lookup)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="espboot",
        description="Assemble UEFI boot media and boot them under QEMU",
    )
    parser.add_argument("--log-json", type=Path, help="Write structured logs as JSON lines")
    sub = parser.add_subparsers(dest="command", required=True)
    arch_help = f"Target architecture (supported: {', '.join(sorted(ARCHITECTURES))})"

    assemble_p = sub.add_parser("assemble", help="Lay out an executable as a boot medium")
    assemble_p.add_argument("executable", type=Path)
    assemble_p.add_argument("output_dir", type=Path)
    assemble_p.add_argument("--arch", help=arch_help)
    assemble_p.set_defaults(handler=cmd_assemble)

    launch_p = sub.add_parser("launch", help="Boot an assembled medium")
    launch_p.add_argument("medium_dir", type=Path)
    launch_p.add_argument("--arch", help=arch_help)
    _add_launch_arguments(launch_p)
    launch_p.set_defaults(handler=cmd_launch)

    run_p = sub.add_parser("run", help="Assemble into a temporary medium and boot it")
    run_p.add_argument("executable", type=Path)
    run_p.add_argument("--arch", help=arch_help)
    _add_launch_arguments(run_p)
    run_p.set_defaults(handler=cmd_run)

    return parser


def _terminate(signum: int, frame: object) -> None:
    # Unwinds like Ctrl-C: the emulator is killed and the working copy removed.
    raise SystemExit(128 + signum)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = StructuredLogger()
    previous = signal.signal(signal.SIGTERM, _terminate)
    try:
        return args.handler(args, logger)
    except EspBootError as exc:
        logger.log(
            operation="error",
            arch=getattr(args, "arch", None),
            phase=args.command,
            message=exc.args[0],
            level="error",
            extra=exc.to_dict(),
        )
        print(f"error[{exc.code}]: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    finally:
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)
        if args.log_json is not None:
            logger.to_json_lines(args.log_json)


if __name__ == "__main__":
    raise SystemExit(main())
