"""Emulator adapter protocol and factory."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from espboot.errors import LaunchFailureError
from espboot.models import FirmwarePair, LaunchOptions

from .qemu import QemuEmulator


class Emulator(Protocol):
    name: str
    binary: str

    def attach_readonly_flash(self, path: Path, *, unit: int) -> tuple[str, ...]:
        """Return arguments attaching *path* as a read-only raw flash drive."""

    def attach_writable_disk(self, path: Path) -> tuple[str, ...]:
        """Return arguments attaching directory *path* as a writable raw disk."""

    def validate_options(self, options: LaunchOptions) -> None:
        """Raise ``ValidationError`` for options this emulator cannot honour."""

    def option_args(self, options: LaunchOptions) -> tuple[str, ...]:
        """Return arguments for memory and display options."""

    def build_command(
        self,
        firmware: FirmwarePair,
        disk: Path,
        options: LaunchOptions,
    ) -> tuple[str, ...]:
        """Return the full argv for one boot attempt."""


def get_emulator(name: str, *, binary: str | None = None) -> Emulator:
    if name == "qemu":
        if binary is None:
            return QemuEmulator()
        return QemuEmulator(binary=binary)
    raise LaunchFailureError("Unsupported emulator.", context={"emulator": name})


__all__ = [
    "Emulator",
    "QemuEmulator",
    "get_emulator",
]
