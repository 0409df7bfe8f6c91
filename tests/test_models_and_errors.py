from pathlib import Path

import pytest

from espboot.errors import (
    ErrorCode,
    FirmwareNotFoundError,
    InvalidMediumError,
    LaunchFailureError,
    SourceNotFoundError,
    UnsupportedArchitectureError,
    ValidationError,
    WriteFailureError,
)
from espboot.models import BootMedium, LaunchOptions, arch_spec


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        ValidationError("bad input"),
        SourceNotFoundError("no source"),
        UnsupportedArchitectureError("no mapping"),
        WriteFailureError("cannot write"),
        InvalidMediumError("no boot file"),
        FirmwareNotFoundError("no firmware"),
        LaunchFailureError("no emulator"),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.VALIDATION.value,
        ErrorCode.SOURCE_NOT_FOUND.value,
        ErrorCode.UNSUPPORTED_ARCHITECTURE.value,
        ErrorCode.WRITE_FAILURE.value,
        ErrorCode.INVALID_MEDIUM.value,
        ErrorCode.FIRMWARE_NOT_FOUND.value,
        ErrorCode.LAUNCH_FAILURE.value,
    ]


def test_error_str_includes_hint_and_non_empty_context() -> None:
    error = InvalidMediumError(
        "Boot medium has no boot file.",
        hint="Assemble first.",
        context={"medium": "/tmp/esp", "found": ""},
    )

    rendered = str(error)

    assert rendered.splitlines()[0] == "Boot medium has no boot file."
    assert "Hint: Assemble first." in rendered
    assert "  medium: /tmp/esp" in rendered
    assert "found" not in rendered


def test_error_to_dict() -> None:
    payload = FirmwareNotFoundError("missing", context={"path": "/fw"}).to_dict()

    assert payload["code"] == "E_FIRMWARE_NOT_FOUND"
    assert payload["context"] == {"path": "/fw"}
    assert "hint" not in payload


def test_boot_medium_boot_file_uses_canonical_name() -> None:
    medium = BootMedium(root=Path("/tmp/esp"))
    assert medium.boot_file == Path("/tmp/esp/efi/boot/bootx64.efi")


def test_arch_spec_rejects_unknown_architecture() -> None:
    with pytest.raises(UnsupportedArchitectureError):
        arch_spec("riscv64")
    assert arch_spec("x86_64").boot_filename == "bootx64.efi"


def test_launch_options_defaults() -> None:
    options = LaunchOptions.from_mapping(None)
    assert options == LaunchOptions(
        memory_size=None,
        display_mode="interactive",
        extra_disk_space=False,
    )


def test_launch_options_reject_unknown_keys() -> None:
    with pytest.raises(ValidationError) as excinfo:
        LaunchOptions.from_mapping({"memory_size": "1G", "memroy": "2G"})

    assert excinfo.value.context["unknown"] == "memroy"


def test_launch_options_accept_integer_memory() -> None:
    assert LaunchOptions.from_mapping({"memory_size": 512}).memory_size == "512"


@pytest.mark.parametrize(
    "options",
    [
        {"memory_size": "lots"},
        {"memory_size": "0"},
        {"display_mode": "fullscreen"},
        {"extra_disk_space": "yes"},
    ],
)
def test_launch_options_reject_invalid_values(options: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        LaunchOptions.from_mapping(options)
