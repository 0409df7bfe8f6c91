"""Image assembler: lay a compiled UEFI executable out as a boot medium.

The medium is a plain directory tree. Firmware scanning removable media looks
for ``efi/boot/<arch filename>`` (``bootx64.efi`` on x86_64), so that is the
only file the assembler writes.
"""

from __future__ import annotations

import os
import shutil
import uuid
from pathlib import Path

from espboot.errors import SourceNotFoundError, ValidationError, WriteFailureError
from espboot.models import (
    DEFAULT_ARCH,
    BootMedium,
    arch_spec,
    canonical_boot_filenames,
)
from espboot.observability import StructuredLogger
from espboot.pe import detect_arch

BOOT_FILE_MODE = 0o444


def assemble(
    executable_path: str | Path,
    output_root: str | Path,
    *,
    arch: str | None = None,
    logger: StructuredLogger | None = None,
) -> BootMedium:
    """Place *executable_path* at ``output_root/efi/boot/<arch filename>``.

    Re-running with the same inputs produces the same tree: the boot file is
    replaced atomically and leftovers under ``efi/boot`` are removed.
    """
    source = Path(executable_path)
    if not source.is_file():
        raise SourceNotFoundError(
            "Executable not found.",
            hint="Build the UEFI executable before assembling the boot medium.",
            context={"path": str(source), "expected": "regular file"},
        )

    resolved_arch = _resolve_arch(source, arch)
    spec = arch_spec(resolved_arch)
    medium = BootMedium(root=Path(output_root), arch=spec.name)

    if logger is not None:
        logger.log(
            operation="assemble_start",
            arch=spec.name,
            phase="assemble",
            message="Assembling boot medium.",
            extra={"source": str(source), "output_root": str(medium.root)},
        )

    try:
        medium.boot_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteFailureError(
            "Cannot create boot directory.",
            hint="Check that the output location is writable.",
            context={"path": str(medium.boot_dir), "error": str(exc)},
        ) from exc

    _install_boot_file(source, medium.boot_file)
    removed = _remove_stale_entries(medium)

    if logger is not None:
        logger.log(
            operation="assemble_complete",
            arch=spec.name,
            phase="assemble",
            message="Boot medium assembled.",
            extra={"boot_file": str(medium.boot_file), "removed": removed},
        )
    return medium


def _resolve_arch(source: Path, declared: str | None) -> str:
    try:
        detected = detect_arch(source)
    except OSError as exc:
        raise SourceNotFoundError(
            "Executable is not readable.",
            context={"path": str(source), "error": str(exc)},
        ) from exc

    if declared is None:
        return detected or DEFAULT_ARCH
    arch_spec(declared)
    if detected is not None and detected != declared:
        raise ValidationError(
            "Executable architecture does not match the requested architecture.",
            hint="Pass the architecture the executable was built for, or omit it.",
            context={"path": str(source), "expected": declared, "found": detected},
        )
    return declared


def _install_boot_file(source: Path, destination: Path) -> None:
    staging = destination.with_name(f".{destination.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        shutil.copyfile(source, staging)
        os.chmod(staging, BOOT_FILE_MODE)
        os.replace(staging, destination)
    except OSError as exc:
        staging.unlink(missing_ok=True)
        raise WriteFailureError(
            "Cannot write boot file.",
            hint="Check permissions on the output location.",
            context={"source": str(source), "path": str(destination), "error": str(exc)},
        ) from exc


def _remove_stale_entries(medium: BootMedium) -> list[str]:
    keep = canonical_boot_filenames()
    removed: list[str] = []
    for entry in sorted(medium.boot_dir.iterdir()):
        if entry.name in keep:
            continue
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as exc:
            raise WriteFailureError(
                "Cannot remove stale entry from boot directory.",
                context={"path": str(entry), "error": str(exc)},
            ) from exc
        removed.append(entry.name)
    return removed


__all__ = ["BOOT_FILE_MODE", "assemble"]
