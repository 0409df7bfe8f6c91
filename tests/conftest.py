"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from espboot.assembler import assemble
from espboot.models import BootMedium, FirmwarePair

HELLO_BYTES = b"hello.efi\n"


def pe_image(machine: int, *, size: int = 0x100) -> bytes:
    """Return a minimal PE header with the given COFF machine field."""
    buf = bytearray(size)
    buf[0:2] = b"MZ"
    pe_off = 0x80
    buf[0x3C:0x40] = pe_off.to_bytes(4, "little")
    buf[pe_off : pe_off + 4] = b"PE\0\0"
    buf[pe_off + 4 : pe_off + 6] = machine.to_bytes(2, "little")
    return bytes(buf)


def disk_path(cmd: Sequence[str]) -> Path:
    """Return the directory attached as the writable disk in *cmd*."""
    for arg in cmd:
        if arg.startswith("format=raw,file=fat:"):
            return Path(arg.split("rw:", 1)[1])
    raise AssertionError(f"no directory-backed disk in {cmd!r}")


@dataclass
class FakeRun:
    """Stand-in for ``subprocess.run`` that records the disk it was given."""

    returncode: int = 0
    raises: BaseException | None = None
    on_call: Callable[[Path], None] | None = None
    calls: list[tuple[str, ...]] = field(default_factory=list)
    kwargs: list[dict[str, object]] = field(default_factory=list)
    workdirs: list[Path] = field(default_factory=list)

    def __call__(self, cmd: Sequence[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        self.calls.append(tuple(cmd))
        self.kwargs.append(kwargs)
        workdir = disk_path(cmd)
        self.workdirs.append(workdir)
        if self.on_call is not None:
            self.on_call(workdir)
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(list(cmd), self.returncode)


@pytest.fixture
def hello_efi(tmp_path: Path) -> Path:
    path = tmp_path / "hello.efi"
    path.write_bytes(HELLO_BYTES)
    return path


@pytest.fixture
def medium(tmp_path: Path, hello_efi: Path) -> BootMedium:
    return assemble(hello_efi, tmp_path / "esp")


@pytest.fixture
def firmware(tmp_path: Path) -> FirmwarePair:
    fw_dir = tmp_path / "ovmf"
    fw_dir.mkdir()
    code = fw_dir / "OVMF_CODE.fd"
    vars_ = fw_dir / "OVMF_VARS.fd"
    code.write_bytes(b"code")
    vars_.write_bytes(b"vars")
    return FirmwarePair(code=code, vars=vars_)


@pytest.fixture
def work_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch) -> FakeRun:
    """Pretend QEMU is installed and exits immediately."""
    fake = FakeRun()
    monkeypatch.delenv("ESPBOOT_QEMU", raising=False)
    monkeypatch.setattr("espboot.launcher.shutil.which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr("espboot.launcher.subprocess.run", fake)
    return fake
