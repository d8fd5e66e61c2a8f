"""
Trap routine tests: console output, console input, HALT, keyboard polling.

Output is checked through the console's tx_buffer (ConsoleDevice.output).
"""

import pytest

from lc3_emulator import ConsoleIOError, EmulatorConfig, StopReason
from lc3_emulator.cpu.regs import ConditionFlag, Register

from conftest import load, make_emu


# ─── Output traps ──────────────────────────────

class TestOutput:

    def test_puts(self):
        emu = make_emu()
        load(emu, [
            0xE002,            # LEA R0,#2   -> x3003
            0xF022,            # PUTS
            0xF025,            # HALT
            0x0048, 0x0049, 0x0000,
        ])
        assert emu.run() is StopReason.HALT
        assert emu.console.output == b"HIHALT\n"

    def test_puts_empty_string(self):
        emu = make_emu()
        load(emu, [0xE002, 0xF022, 0xF025, 0x0000])
        emu.run()
        assert emu.console.output == b"HALT\n"

    def test_out_writes_low_byte(self):
        emu = make_emu()
        emu.regs.update(Register.R0, 0x0141)
        load(emu, [0xF021, 0xF025])    # OUT; HALT
        emu.run()
        assert emu.console.output == b"AHALT\n"

    def test_putsp_packed(self):
        emu = make_emu()
        load(emu, [
            0xE002,            # LEA R0,#2
            0xF024,            # PUTSP
            0xF025,            # HALT
            0x6548,            # 'H','e'
            0x006C,            # 'l', no high byte
            0x0000,
        ])
        emu.run()
        assert emu.console.output == b"HelHALT\n"

    def test_output_reaches_stream(self):
        emu = make_emu()
        emu.regs.update(Register.R0, ord("x"))
        load(emu, [0xF021, 0xF025])
        emu.run()
        assert emu.console._output.getvalue() == b"xHALT\n"

    def test_traps_leave_r7(self):
        emu = make_emu()
        emu.regs.update(Register.R7, 0x1234)
        load(emu, [0xF021, 0xF025])
        emu.run()
        assert emu.regs.R7 == 0x1234


# ─── Input traps ───────────────────────────────

class TestInput:

    def test_getc_sets_r0_keeps_flags(self):
        emu = make_emu(stdin=b"A")
        emu.regs.update(Register.COND, ConditionFlag.NEG)
        load(emu, [0xF020, 0xF025])    # GETC; HALT
        emu.run()
        assert emu.regs.R0 == 0x41
        assert emu.regs.cond == ConditionFlag.NEG
        assert emu.console.output == b"HALT\n"     # no echo

    def test_getc_injected(self):
        emu = make_emu()
        emu.console.inject_input(b"\x7f")
        load(emu, [0xF020, 0xF025])
        emu.run()
        assert emu.regs.R0 == 0x7F

    def test_in_prompts_then_reads(self):
        emu = make_emu(stdin=b"q")
        load(emu, [0xF023, 0xF025])    # IN; HALT
        emu.run()
        assert emu.regs.R0 == ord("q")
        assert emu.console.output == b"Enter a character: HALT\n"

    def test_in_custom_prompt(self):
        emu = make_emu(stdin=b"q", config=EmulatorConfig(in_prompt="> "))
        load(emu, [0xF023, 0xF025])
        emu.run()
        assert emu.console.output.startswith(b"> ")

    def test_getc_on_closed_input_raises(self):
        emu = make_emu(stdin=b"")
        load(emu, [0xF020, 0xF025])
        with pytest.raises(ConsoleIOError):
            emu.run()


# ─── HALT ──────────────────────────────────────

class TestHalt:

    def test_halt_stops_machine(self):
        emu = make_emu()
        load(emu, [0xF025, 0x1021])    # HALT; ADD R0,R0,#1 (never runs)
        assert emu.run() is StopReason.HALT
        assert emu.running is False
        assert emu.regs.R0 == 0
        assert emu.steps == 1
        assert emu.console.output == b"HALT\n"

    def test_step_after_halt(self):
        emu = make_emu()
        load(emu, [0xF025])
        emu.run()
        assert emu.step() is StopReason.HALT
        assert emu.steps == 1

    def test_custom_halt_message(self):
        emu = make_emu(config=EmulatorConfig(halt_message="--- halted ---"))
        load(emu, [0xF025])
        emu.run()
        assert emu.console.output == b"--- halted ---\n"


# ─── Keyboard polling program ──────────────────

KBD_POLL = [
    0xA203,    # x3000  LDI R1,#3     R1 <- mem[mem[x3004]] = KBSR
    0x07FE,    # x3001  BRzp #-2      loop until bit 15 set
    0xA002,    # x3002  LDI R0,#2     R0 <- mem[mem[x3005]] = KBDR
    0xF025,    # x3003  HALT
    0xFE00,    # x3004  .FILL KBSR
    0xFE02,    # x3005  .FILL KBDR
]


class TestKeyboardPolling:

    def test_key_ready(self):
        emu = make_emu()
        emu.console.inject_input("k")
        load(emu, KBD_POLL)
        assert emu.run(max_steps=50) is StopReason.HALT
        assert emu.regs.R0 == 0x6B
        assert emu.regs.R1 == 0x8000

    def test_no_key_spins_without_blocking(self):
        emu = make_emu()
        load(emu, KBD_POLL)
        assert emu.run(max_steps=50) is StopReason.TIMEOUT
        assert emu.regs.PC in (0x3000, 0x3001)
        assert emu.running

    def test_key_arrives_later(self):
        emu = make_emu()
        load(emu, KBD_POLL)
        assert emu.run(max_steps=10) is StopReason.TIMEOUT
        emu.console.inject_input("!")
        assert emu.run(max_steps=10) is StopReason.HALT
        assert emu.regs.R0 == ord("!")
