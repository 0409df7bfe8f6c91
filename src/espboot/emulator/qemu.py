"""QEMU emulator adapter.

Boots the medium the way OVMF expects on a stock machine:
- OVMF code and vars images as two read-only pflash drives
- the medium directory exposed through QEMU's vvfat driver (``fat:rw:``)
  so the guest sees a FAT volume synthesized from the directory contents
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from espboot.errors import ValidationError
from espboot.models import FirmwarePair, LaunchOptions


@dataclass(slots=True)
class QemuEmulator:
    name: str = "qemu"
    binary: str = "qemu-system-x86_64"
    extra_args: list[str] = field(default_factory=list)

    def attach_readonly_flash(self, path: Path, *, unit: int) -> tuple[str, ...]:
        return ("-drive", f"if=pflash,format=raw,unit={unit},readonly=on,file={path}")

    def attach_writable_disk(self, path: Path) -> tuple[str, ...]:
        return ("-drive", f"format=raw,file=fat:rw:{path}")

    def validate_options(self, options: LaunchOptions) -> None:
        # vvfat volumes have a fixed 1024x16x63 geometry whatever the FAT type.
        if options.extra_disk_space:
            raise ValidationError(
                "Extra disk space is not available on a directory-backed disk.",
                hint="Drop extra_disk_space; the vvfat volume size is fixed.",
                context={"emulator": self.name, "extra_disk_space": "True"},
            )

    def option_args(self, options: LaunchOptions) -> tuple[str, ...]:
        args: list[str] = []
        if options.memory_size is not None:
            args.extend(["-m", options.memory_size])
        if options.display_mode == "headless":
            args.extend(["-display", "none", "-serial", "stdio"])
        return tuple(args)

    def build_command(
        self,
        firmware: FirmwarePair,
        disk: Path,
        options: LaunchOptions,
    ) -> tuple[str, ...]:
        self.validate_options(options)
        cmd: list[str] = [self.binary]
        cmd.extend(self.attach_readonly_flash(firmware.code, unit=0))
        cmd.extend(self.attach_readonly_flash(firmware.vars, unit=1))
        cmd.extend(self.attach_writable_disk(disk))
        cmd.extend(self.option_args(options))
        cmd.extend(self.extra_args)
        return tuple(cmd)
