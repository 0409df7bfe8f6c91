"""Minimal PE/COFF header inspection for UEFI executables."""

from __future__ import annotations

from pathlib import Path

DOS_MAGIC = b"MZ"
PE_SIGNATURE = b"PE\0\0"
PE_OFFSET_FIELD = 0x3C

# COFF machine field values for architectures UEFI firmware exists for.
PE_MACHINES: dict[int, str] = {
    0x014C: "ia32",
    0x01C2: "arm",
    0x8664: "x86_64",
    0xAA64: "aarch64",
    0x5064: "riscv64",
    0x6264: "loongarch64",
}


def read_machine(path: Path) -> int | None:
    """Return the COFF machine field, or ``None`` if *path* is not a PE image."""
    with path.open("rb") as handle:
        dos_header = handle.read(PE_OFFSET_FIELD + 4)
        if len(dos_header) < PE_OFFSET_FIELD + 4 or dos_header[:2] != DOS_MAGIC:
            return None
        pe_offset = int.from_bytes(dos_header[PE_OFFSET_FIELD:], "little")
        handle.seek(pe_offset)
        header = handle.read(6)
    if len(header) < 6 or header[:4] != PE_SIGNATURE:
        return None
    return int.from_bytes(header[4:6], "little")


def detect_arch(path: Path) -> str | None:
    """Map the PE machine of *path* to an architecture name.

    Unknown machine values are returned as ``machine-0x....`` so callers can
    still report them.
    """
    machine = read_machine(path)
    if machine is None:
        return None
    return PE_MACHINES.get(machine, f"machine-{machine:#06x}")


__all__ = ["PE_MACHINES", "detect_arch", "read_machine"]
