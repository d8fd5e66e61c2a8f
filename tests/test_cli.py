"""
CLI tests: argument parsing and exit codes.
"""

import io

import pytest

import lc3emu
from lc3_emulator import ConsoleDevice


def _console(stdin: bytes = b""):
    return ConsoleDevice(io.BytesIO(stdin), io.BytesIO())


def _image(tmp_path, data: bytes, name: str = "prog.obj"):
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


# origin x3000; LEA R0,#2; PUTS; HALT; "Hi"
HELLO = bytes([
    0x30, 0x00,
    0xE0, 0x02, 0xF0, 0x22, 0xF0, 0x25,
    0x00, 0x48, 0x00, 0x69, 0x00, 0x00,
])


class TestParseIntArg:

    @pytest.mark.parametrize("text, expected", [
        ("0x3000", 0x3000),
        ("x3000", 0x3000),
        ("X4000", 0x4000),
        ("12288", 12288),
        (" 0X10 ", 16),
    ])
    def test_formats(self, text, expected):
        assert lc3emu.parse_int_arg(text) == expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            lc3emu.parse_int_arg("zz")


class TestMain:

    def test_halt_exit_zero(self, tmp_path):
        console = _console()
        assert lc3emu.main([_image(tmp_path, HELLO)], console=console) == 0
        assert console.output == b"HiHALT\n"

    def test_missing_argument_is_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            lc3emu.main([], console=_console())
        assert exc.value.code == 2

    def test_bad_pc_start(self, tmp_path):
        with pytest.raises(SystemExit):
            lc3emu.main([_image(tmp_path, HELLO), "--pc-start", "x10000"],
                        console=_console())

    def test_missing_image(self, tmp_path):
        assert lc3emu.main([str(tmp_path / "missing.obj")], console=_console()) == 1

    def test_truncated_image(self, tmp_path):
        assert lc3emu.main([_image(tmp_path, b"\x30")], console=_console()) == 1

    def test_decode_fault(self, tmp_path):
        path = _image(tmp_path, bytes([0x30, 0x00, 0xF0, 0xFF]))   # TRAP xFF
        assert lc3emu.main([path], console=_console()) == 1

    def test_step_budget(self, tmp_path):
        path = _image(tmp_path, bytes([0x30, 0x00, 0x0F, 0xFF]))   # BRnzp #-1
        assert lc3emu.main([path, "--max-steps", "20"], console=_console()) == 1

    def test_console_input_closed(self, tmp_path):
        path = _image(tmp_path, bytes([0x30, 0x00, 0xF0, 0x20, 0xF0, 0x25]))
        assert lc3emu.main([path], console=_console(b"")) == 2

    def test_pc_start_override(self, tmp_path):
        # origin x4000 holds HALT; x3000 is never executed
        path = _image(tmp_path, bytes([0x40, 0x00, 0xF0, 0x25]))
        console = _console()
        assert lc3emu.main([path, "--pc-start", "x4000"], console=console) == 0
        assert console.output == b"HALT\n"

    def test_log_file(self, tmp_path):
        log_path = tmp_path / "run.log"
        lc3emu.main([_image(tmp_path, HELLO), "--trace", "--log-file", str(log_path)],
                    console=_console())
        text = log_path.read_text()
        assert "x3000: E002 LEA" in text


class TestRawTerminal:

    def test_non_tty_is_noop(self):
        with lc3emu.raw_terminal(io.BytesIO()):
            pass
