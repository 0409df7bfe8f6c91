from pathlib import Path

from conftest import pe_image

from espboot.pe import detect_arch, read_machine


def test_read_machine_returns_coff_machine(tmp_path: Path) -> None:
    path = tmp_path / "app.efi"
    path.write_bytes(pe_image(0x8664))

    assert read_machine(path) == 0x8664
    assert detect_arch(path) == "x86_64"


def test_non_pe_files_have_no_machine(tmp_path: Path) -> None:
    short = tmp_path / "short.efi"
    short.write_bytes(b"MZ")
    text = tmp_path / "text.efi"
    text.write_bytes(b"x" * 0x200)

    assert read_machine(short) is None
    assert read_machine(text) is None
    assert detect_arch(text) is None


def test_bad_pe_signature_is_not_a_pe(tmp_path: Path) -> None:
    data = bytearray(pe_image(0x8664))
    data[0x80:0x84] = b"NE\0\0"
    path = tmp_path / "bad.efi"
    path.write_bytes(bytes(data))

    assert read_machine(path) is None


def test_pe_offset_past_end_of_file(tmp_path: Path) -> None:
    data = bytearray(pe_image(0x8664))
    data[0x3C:0x40] = (0x10000).to_bytes(4, "little")
    path = tmp_path / "truncated.efi"
    path.write_bytes(bytes(data))

    assert read_machine(path) is None


def test_unknown_machine_is_reported_by_value(tmp_path: Path) -> None:
    path = tmp_path / "odd.efi"
    path.write_bytes(pe_image(0x1234))

    assert detect_arch(path) == "machine-0x1234"
