"""Emulated boot launcher.

Boots an assembled medium under an emulator with UEFI firmware. The emulator
writes to its disk, so it never sees the durable medium: each launch works on
a fresh copy in a temporary directory that is removed however the run ends.
"""

from __future__ import annotations

import os
import shutil
import stat
import subprocess
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from espboot.config import emulator_override
from espboot.emulator import Emulator, get_emulator
from espboot.errors import (
    FirmwareNotFoundError,
    InvalidMediumError,
    LaunchFailureError,
    WriteFailureError,
)
from espboot.models import (
    DEFAULT_ARCH,
    BootMedium,
    FirmwarePair,
    LaunchOptions,
    LaunchResult,
    arch_spec,
)
from espboot.observability import StructuredLogger

WORKDIR_PREFIX = "espboot-"


@contextmanager
def working_copy(medium_root: Path, *, temp_root: Path | None = None) -> Iterator[Path]:
    """Yield a writable copy of *medium_root*; the copy is removed on exit."""
    try:
        workdir = Path(
            tempfile.mkdtemp(
                prefix=WORKDIR_PREFIX,
                dir=str(temp_root) if temp_root is not None else None,
            )
        )
    except OSError as exc:
        raise WriteFailureError(
            "Cannot create a working directory for the boot attempt.",
            context={"temp_root": str(temp_root or tempfile.gettempdir()), "error": str(exc)},
        ) from exc
    try:
        try:
            shutil.copytree(medium_root, workdir, dirs_exist_ok=True)
            _grant_write(workdir)
        except OSError as exc:
            raise WriteFailureError(
                "Cannot populate the working copy of the boot medium.",
                context={
                    "source": str(medium_root),
                    "workdir": str(workdir),
                    "error": str(exc),
                },
            ) from exc
        yield workdir
    finally:
        shutil.rmtree(workdir, ignore_errors=True)


def _grant_write(root: Path) -> None:
    for dirpath, dirnames, filenames in os.walk(root):
        for name in (*dirnames, *filenames):
            path = Path(dirpath) / name
            if path.is_symlink():
                continue
            path.chmod(path.stat().st_mode | stat.S_IWUSR)
    root.chmod(root.stat().st_mode | stat.S_IWUSR)


def launch(
    medium_root: str | Path,
    firmware_code_path: str | Path,
    firmware_vars_path: str | Path,
    options: LaunchOptions | Mapping[str, object] | None = None,
    *,
    arch: str = DEFAULT_ARCH,
    emulator: Emulator | None = None,
    timeout: float | None = None,
    temp_root: str | Path | None = None,
    logger: StructuredLogger | None = None,
) -> LaunchResult:
    """Boot *medium_root* once and return the emulator's exit status.

    Blocks until the emulator exits. With *timeout*, the emulator is killed
    once it elapses and the result is marked ``timed_out``; nothing else about
    the guest is inspected.
    """
    launch_options = (
        options if isinstance(options, LaunchOptions) else LaunchOptions.from_mapping(options)
    )
    medium = BootMedium(root=Path(medium_root), arch=arch)
    _check_medium(medium)
    firmware = FirmwarePair(code=Path(firmware_code_path), vars=Path(firmware_vars_path))
    _check_firmware(firmware)

    runner = emulator
    if runner is None:
        runner = get_emulator(
            "qemu",
            binary=emulator_override() or arch_spec(arch).emulator_binary,
        )
    runner.validate_options(launch_options)
    _check_emulator(runner)

    with working_copy(
        medium.root,
        temp_root=Path(temp_root) if temp_root is not None else None,
    ) as workdir:
        cmd = runner.build_command(firmware, workdir, launch_options)
        if logger is not None:
            logger.log(
                operation="launch_start",
                arch=arch,
                phase="launch",
                message="Starting emulator.",
                extra={"workdir": str(workdir), "command": list(cmd)},
            )
        try:
            completed = subprocess.run(cmd, check=False, timeout=timeout)
        except subprocess.TimeoutExpired:
            if logger is not None:
                logger.log(
                    operation="launch_timeout",
                    arch=arch,
                    phase="launch",
                    message="Emulator stopped after timeout.",
                    level="warning",
                    extra={"timeout": timeout},
                )
            return LaunchResult(returncode=None, command=cmd, workdir=workdir, timed_out=True)
        except OSError as exc:
            raise LaunchFailureError(
                "Emulator process could not be started.",
                hint="Check that the emulator binary is executable on this host.",
                context={
                    "binary": runner.binary,
                    "error": str(exc),
                    "command": " ".join(cmd),
                },
            ) from exc

    if logger is not None:
        logger.log(
            operation="launch_complete",
            arch=arch,
            phase="launch",
            message="Emulator exited.",
            extra={"returncode": completed.returncode},
        )
    return LaunchResult(returncode=completed.returncode, command=cmd, workdir=workdir)


def _check_medium(medium: BootMedium) -> None:
    boot_file = medium.boot_file
    if not boot_file.is_file():
        raise InvalidMediumError(
            "Boot medium has no boot file.",
            hint="Run `espboot assemble` on the executable first.",
            context={
                "medium": str(medium.root),
                "expected": str(boot_file.relative_to(medium.root)),
                "found": "missing",
            },
        )


def _check_firmware(firmware: FirmwarePair) -> None:
    for label, path in (("code", firmware.code), ("vars", firmware.vars)):
        if not path.is_file():
            raise FirmwareNotFoundError(
                f"OVMF firmware {label} image not found.",
                hint="Install OVMF/edk2 or pass the firmware image paths explicitly.",
                context={"image": label, "path": str(path)},
            )


def _check_emulator(runner: Emulator) -> None:
    if shutil.which(runner.binary) is None:
        raise LaunchFailureError(
            f"Emulator binary not found: {runner.binary}",
            hint="Install QEMU and ensure it is in PATH.",
            context={"binary": runner.binary},
        )


__all__ = ["WORKDIR_PREFIX", "launch", "working_copy"]
