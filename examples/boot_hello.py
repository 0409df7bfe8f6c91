"""Build a Rust UEFI app with cargo, then boot it headless under QEMU.

Expects a crate producing ``hello.efi`` for ``x86_64-unknown-uefi`` and OVMF
installed (or OVMF_CODE_PATH / OVMF_VARS_PATH set).
"""

import subprocess
import sys
from pathlib import Path

from espboot import StructuredLogger, assemble, launch, resolve_firmware

CRATE_DIR = Path(".")
TARGET = "x86_64-unknown-uefi"


def boot_hello() -> int:
    subprocess.run(
        ["cargo", "build", "--release", "--target", TARGET],
        cwd=CRATE_DIR,
        check=True,
    )
    executable = CRATE_DIR / "target" / TARGET / "release" / "hello.efi"

    logger = StructuredLogger()
    medium = assemble(executable, CRATE_DIR / "target" / "esp", logger=logger)
    firmware = resolve_firmware()
    result = launch(
        medium.root,
        firmware.code,
        firmware.vars,
        {"display_mode": "headless", "memory_size": "512M"},
        timeout=30,
        logger=logger,
    )
    logger.to_json_lines(CRATE_DIR / "target" / "espboot.jsonl")
    if result.timed_out:
        print("Emulator still running after 30s; stopped it.")
        return 0
    return result.returncode or 0


if __name__ == "__main__":
    sys.exit(boot_hello())
