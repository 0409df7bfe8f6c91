"""Core typed dataclasses for boot media, firmware, and launch requests."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Literal

from espboot.errors import UnsupportedArchitectureError, ValidationError

DisplayMode = Literal["headless", "interactive"]

BOOT_DIR = Path("efi") / "boot"

DISPLAY_MODES: tuple[DisplayMode, ...] = ("headless", "interactive")

_MEMORY_SIZE = re.compile(r"^[1-9][0-9]*[KMGT]?$")


@dataclass(frozen=True, slots=True)
class ArchSpec:
    """Per-architecture constants for the removable-media boot path."""

    name: str
    boot_filename: str
    emulator_binary: str


# Firmware looks up exactly these names under efi/boot on removable media.
ARCHITECTURES: Mapping[str, ArchSpec] = {
    "x86_64": ArchSpec(
        name="x86_64",
        boot_filename="bootx64.efi",
        emulator_binary="qemu-system-x86_64",
    ),
}

DEFAULT_ARCH = "x86_64"


def arch_spec(arch: str) -> ArchSpec:
    try:
        return ARCHITECTURES[arch]
    except KeyError:
        raise UnsupportedArchitectureError(
            f"No canonical boot filename for architecture `{arch}`.",
            hint="Build the executable for one of the supported architectures.",
            context={
                "arch": arch,
                "supported": ", ".join(sorted(ARCHITECTURES)),
            },
        ) from None


def canonical_boot_filenames() -> frozenset[str]:
    return frozenset(spec.boot_filename for spec in ARCHITECTURES.values())


@dataclass(frozen=True, slots=True)
class BootMedium:
    """Root of a boot volume laid out as ``efi/boot/<arch filename>``."""

    root: Path
    arch: str = DEFAULT_ARCH

    @property
    def boot_dir(self) -> Path:
        return self.root / BOOT_DIR

    @property
    def boot_file(self) -> Path:
        return self.boot_dir / arch_spec(self.arch).boot_filename


@dataclass(frozen=True, slots=True)
class FirmwarePair:
    code: Path
    vars: Path


@dataclass(frozen=True, slots=True)
class LaunchOptions:
    """Recognized launch options.

    ``memory_size`` takes an emulator size string (``512M``, ``2G``) or a bare
    number of MiB. ``None`` leaves the emulator default in place.
    """

    memory_size: str | None = None
    display_mode: DisplayMode = "interactive"
    extra_disk_space: bool = False

    def __post_init__(self) -> None:
        if self.memory_size is not None and (
            not isinstance(self.memory_size, str) or not _MEMORY_SIZE.match(self.memory_size)
        ):
            raise ValidationError(
                "Invalid memory size.",
                hint="Use a positive integer with an optional K, M, G or T suffix.",
                context={"memory_size": str(self.memory_size)},
            )
        if self.display_mode not in DISPLAY_MODES:
            raise ValidationError(
                "Invalid display mode.",
                context={
                    "display_mode": str(self.display_mode),
                    "expected": ", ".join(DISPLAY_MODES),
                },
            )
        if not isinstance(self.extra_disk_space, bool):
            raise ValidationError(
                "extra_disk_space must be a boolean.",
                context={"extra_disk_space": repr(self.extra_disk_space)},
            )

    @classmethod
    def from_mapping(cls, options: Mapping[str, object] | None) -> LaunchOptions:
        if options is None:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValidationError(
                "Unrecognized launch options.",
                hint="Remove or correct the misspelled option names.",
                context={
                    "unknown": ", ".join(unknown),
                    "recognized": ", ".join(sorted(known)),
                },
            )
        values = dict(options)
        memory_size = values.get("memory_size")
        if isinstance(memory_size, int) and not isinstance(memory_size, bool):
            values["memory_size"] = str(memory_size)
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class LaunchResult:
    """Outcome of one boot attempt.

    ``returncode`` is the emulator's exit status, or ``None`` when the run was
    stopped because the timeout elapsed. ``workdir`` has already been removed.
    """

    returncode: int | None
    command: tuple[str, ...]
    workdir: Path
    timed_out: bool = False


__all__ = [
    "ARCHITECTURES",
    "ArchSpec",
    "BOOT_DIR",
    "BootMedium",
    "DEFAULT_ARCH",
    "DISPLAY_MODES",
    "DisplayMode",
    "FirmwarePair",
    "LaunchOptions",
    "LaunchResult",
    "arch_spec",
    "canonical_boot_filenames",
]
