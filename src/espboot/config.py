"""Firmware and emulator discovery.

Code and vars images are resolved as a pair: explicit paths, then the
environment variables, then the first well-known install location holding
both images. A vars store only matches the code image it was built with, so
the two are never picked from different locations.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from espboot.errors import FirmwareNotFoundError
from espboot.models import FirmwarePair

OVMF_CODE_ENV = "OVMF_CODE_PATH"
OVMF_VARS_ENV = "OVMF_VARS_PATH"
EMULATOR_ENV = "ESPBOOT_QEMU"

# Common OVMF firmware paths, as (code, vars) pairs from the same build
OVMF_FIRMWARE_PAIRS: tuple[tuple[str, str], ...] = (
    ("/usr/share/OVMF/OVMF_CODE.fd", "/usr/share/OVMF/OVMF_VARS.fd"),
    ("/usr/share/edk2/ovmf/OVMF_CODE.fd", "/usr/share/edk2/ovmf/OVMF_VARS.fd"),
    ("/usr/share/qemu/OVMF_CODE.fd", "/usr/share/qemu/OVMF_VARS.fd"),
    ("/usr/share/OVMF/OVMF_CODE_4M.fd", "/usr/share/OVMF/OVMF_VARS_4M.fd"),
    ("/usr/share/edk2/x64/OVMF_CODE.fd", "/usr/share/edk2/x64/OVMF_VARS.fd"),
)


def _override(
    explicit: str | Path | None,
    env_var: str,
    environ: Mapping[str, str],
) -> Path | None:
    if explicit is not None:
        return Path(explicit)
    from_env = environ.get(env_var)
    return Path(from_env) if from_env else None


def resolve_firmware(
    code: str | Path | None = None,
    vars: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> FirmwarePair:
    """Return the firmware pair to boot with.

    Resolved paths are not checked for existence here; the launcher does
    that so explicit paths and discovered paths fail the same way.
    """
    env = os.environ if environ is None else environ
    code_path = _override(code, OVMF_CODE_ENV, env)
    vars_path = _override(vars, OVMF_VARS_ENV, env)

    if code_path is not None and vars_path is not None:
        return FirmwarePair(code=code_path, vars=vars_path)
    if code_path is not None or vars_path is not None:
        given, missing = ("code", "vars") if code_path is not None else ("vars", "code")
        raise FirmwareNotFoundError(
            f"OVMF firmware {missing} image not given.",
            hint=f"Pass both images, or set both {OVMF_CODE_ENV} and {OVMF_VARS_ENV}.",
            context={given: str(code_path or vars_path), "missing": missing},
        )

    for code_candidate, vars_candidate in OVMF_FIRMWARE_PAIRS:
        if Path(code_candidate).is_file() and Path(vars_candidate).is_file():
            return FirmwarePair(code=Path(code_candidate), vars=Path(vars_candidate))
    raise FirmwareNotFoundError(
        "OVMF firmware not found.",
        hint=(
            f"Install OVMF/edk2, pass both image paths, or set {OVMF_CODE_ENV} "
            f"and {OVMF_VARS_ENV}."
        ),
        context={
            "searched_pairs": "; ".join(f"{c} + {v}" for c, v in OVMF_FIRMWARE_PAIRS),
        },
    )


def emulator_override(environ: Mapping[str, str] | None = None) -> str | None:
    env = os.environ if environ is None else environ
    return env.get(EMULATOR_ENV) or None


__all__ = [
    "EMULATOR_ENV",
    "OVMF_CODE_ENV",
    "OVMF_FIRMWARE_PAIRS",
    "OVMF_VARS_ENV",
    "emulator_override",
    "resolve_firmware",
]
