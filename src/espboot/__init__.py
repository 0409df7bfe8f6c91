"""Public package entrypoint for espboot."""

from .assembler import assemble
from .config import resolve_firmware
from .emulator import Emulator, QemuEmulator, get_emulator
from .errors import (
    ErrorCode,
    EspBootError,
    FirmwareNotFoundError,
    InvalidMediumError,
    LaunchFailureError,
    SourceNotFoundError,
    UnsupportedArchitectureError,
    ValidationError,
    WriteFailureError,
)
from .launcher import launch, working_copy
from .models import (
    ARCHITECTURES,
    ArchSpec,
    BootMedium,
    FirmwarePair,
    LaunchOptions,
    LaunchResult,
)
from .observability import StructuredLogger

__all__ = [
    "ARCHITECTURES",
    "ArchSpec",
    "BootMedium",
    "Emulator",
    "ErrorCode",
    "EspBootError",
    "FirmwareNotFoundError",
    "FirmwarePair",
    "InvalidMediumError",
    "LaunchFailureError",
    "LaunchOptions",
    "LaunchResult",
    "QemuEmulator",
    "SourceNotFoundError",
    "StructuredLogger",
    "UnsupportedArchitectureError",
    "ValidationError",
    "WriteFailureError",
    "assemble",
    "get_emulator",
    "launch",
    "resolve_firmware",
    "working_copy",
]
