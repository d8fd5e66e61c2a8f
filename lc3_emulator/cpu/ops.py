"""
LC-3 Emulator - Instruction Handlers

One handler per opcode, signature handler(emu, instr). `emu` exposes
`regs` (Registers), `mem` (Memory) and `traps` (TrapTable). PC has
already been advanced past the instruction when a handler runs.

Flag effects:
  ADD AND NOT LD LDI LDR LEA  -> update_flags(DR)
  everything else             -> COND untouched
"""

import logging

from .decoder import (
    Opcode, cond_bits, dr, imm5, imm_flag, jsr_mode, offset6,
    pc_offset9, pc_offset11, sr1, sr2, trap_vector,
)
from .regs import ConditionFlag, Register, Registers
from ..config import SIGN_BIT, WORD_MASK

log = logging.getLogger(__name__)


def update_flags(regs: Registers, reg: Register):
    """Set COND from the signed value of `reg`: exactly one of N, Z, P."""
    value = regs.get(reg)
    if value == 0:
        regs.update(Register.COND, ConditionFlag.ZRO)
    elif value & SIGN_BIT:
        regs.update(Register.COND, ConditionFlag.NEG)
    else:
        regs.update(Register.COND, ConditionFlag.POS)


def _pc_relative(regs: Registers, offset: int) -> int:
    return (regs.PC + offset) & WORD_MASK


# ── Operate ──

def op_add(emu, instr: int):
    regs = emu.regs
    dest = dr(instr)
    a = regs.get(sr1(instr))
    b = imm5(instr) if imm_flag(instr) else regs.get(sr2(instr))
    regs.update(dest, a + b)
    update_flags(regs, dest)


def op_and(emu, instr: int):
    regs = emu.regs
    dest = dr(instr)
    a = regs.get(sr1(instr))
    b = imm5(instr) if imm_flag(instr) else regs.get(sr2(instr))
    regs.update(dest, a & b)
    update_flags(regs, dest)


def op_not(emu, instr: int):
    regs = emu.regs
    dest = dr(instr)
    regs.update(dest, ~regs.get(sr1(instr)))
    update_flags(regs, dest)


# ── Data movement ──

def op_ld(emu, instr: int):
    regs = emu.regs
    dest = dr(instr)
    regs.update(dest, emu.mem.read(_pc_relative(regs, pc_offset9(instr))))
    update_flags(regs, dest)


def op_ldi(emu, instr: int):
    """DR = mem[mem[PC + offset9]]"""
    regs = emu.regs
    dest = dr(instr)
    pointer = emu.mem.read(_pc_relative(regs, pc_offset9(instr)))
    regs.update(dest, emu.mem.read(pointer))
    update_flags(regs, dest)


def op_ldr(emu, instr: int):
    regs = emu.regs
    dest = dr(instr)
    addr = (regs.get(sr1(instr)) + offset6(instr)) & WORD_MASK
    regs.update(dest, emu.mem.read(addr))
    update_flags(regs, dest)


def op_lea(emu, instr: int):
    regs = emu.regs
    dest = dr(instr)
    regs.update(dest, _pc_relative(regs, pc_offset9(instr)))
    update_flags(regs, dest)


def op_st(emu, instr: int):
    regs = emu.regs
    emu.mem.write(_pc_relative(regs, pc_offset9(instr)), regs.get(dr(instr)))


def op_sti(emu, instr: int):
    """mem[mem[PC + offset9]] = SR"""
    regs = emu.regs
    pointer = emu.mem.read(_pc_relative(regs, pc_offset9(instr)))
    emu.mem.write(pointer, regs.get(dr(instr)))


def op_str(emu, instr: int):
    regs = emu.regs
    addr = (regs.get(sr1(instr)) + offset6(instr)) & WORD_MASK
    emu.mem.write(addr, regs.get(dr(instr)))


# ── Control ──

def op_br(emu, instr: int):
    regs = emu.regs
    if cond_bits(instr) & regs.COND:
        regs.update(Register.PC, _pc_relative(regs, pc_offset9(instr)))


def op_jmp(emu, instr: int):
    """JMP BaseR (RET = JMP R7)."""
    regs = emu.regs
    regs.update(Register.PC, regs.get(sr1(instr)))


def op_jsr(emu, instr: int):
    """JSR PCoffset11 / JSRR BaseR. R7 = return address.

    The JSRR target is read before R7 is written, so JSRR R7 jumps to
    the old R7.
    """
    regs = emu.regs
    if jsr_mode(instr):
        target = _pc_relative(regs, pc_offset11(instr))
    else:
        target = regs.get(sr1(instr))
    regs.update(Register.R7, regs.PC)
    regs.update(Register.PC, target)


def op_trap(emu, instr: int):
    emu.traps.dispatch(trap_vector(instr))


def op_rti(emu, instr: int):
    """RTI needs supervisor mode, which is not modelled: no-op."""
    log.debug("RTI at x%04X ignored", (emu.regs.PC - 1) & WORD_MASK)


def op_res(emu, instr: int):
    log.debug("reserved opcode at x%04X ignored", (emu.regs.PC - 1) & WORD_MASK)


HANDLERS = {
    Opcode.BR:   op_br,
    Opcode.ADD:  op_add,
    Opcode.LD:   op_ld,
    Opcode.ST:   op_st,
    Opcode.JSR:  op_jsr,
    Opcode.AND:  op_and,
    Opcode.LDR:  op_ldr,
    Opcode.STR:  op_str,
    Opcode.RTI:  op_rti,
    Opcode.NOT:  op_not,
    Opcode.LDI:  op_ldi,
    Opcode.STI:  op_sti,
    Opcode.JMP:  op_jmp,
    Opcode.RES:  op_res,
    Opcode.LEA:  op_lea,
    Opcode.TRAP: op_trap,
}
