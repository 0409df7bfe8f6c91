"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across the assembler, launcher, and CLI."""

    VALIDATION = "E_VALIDATION"
    SOURCE_NOT_FOUND = "E_SOURCE_NOT_FOUND"
    UNSUPPORTED_ARCHITECTURE = "E_UNSUPPORTED_ARCHITECTURE"
    WRITE_FAILURE = "E_WRITE_FAILURE"
    INVALID_MEDIUM = "E_INVALID_MEDIUM"
    FIRMWARE_NOT_FOUND = "E_FIRMWARE_NOT_FOUND"
    LAUNCH_FAILURE = "E_LAUNCH_FAILURE"


class EspBootError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(EspBootError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class SourceNotFoundError(EspBootError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.SOURCE_NOT_FOUND, hint=hint, context=context)


class UnsupportedArchitectureError(EspBootError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message, code=ErrorCode.UNSUPPORTED_ARCHITECTURE, hint=hint, context=context
        )


class WriteFailureError(EspBootError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.WRITE_FAILURE, hint=hint, context=context)


class InvalidMediumError(EspBootError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.INVALID_MEDIUM, hint=hint, context=context)


class FirmwareNotFoundError(EspBootError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.FIRMWARE_NOT_FOUND, hint=hint, context=context)


class LaunchFailureError(EspBootError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.LAUNCH_FAILURE, hint=hint, context=context)


__all__ = [
    "ErrorCode",
    "EspBootError",
    "FirmwareNotFoundError",
    "InvalidMediumError",
    "LaunchFailureError",
    "SourceNotFoundError",
    "UnsupportedArchitectureError",
    "ValidationError",
    "WriteFailureError",
]
