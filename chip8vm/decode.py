"""CHIP-8 instruction decoding."""

import enum

from chex import dataclass


class Opcode(enum.Enum):
    """Every instruction of the CHIP-8 set, plus a marker for undecodable words."""
    SYS = "0NNN"
    CLS = "00E0"
    RET = "00EE"
    JP = "1NNN"
    CALL = "2NNN"
    SE_IMM = "3XNN"
    SNE_IMM = "4XNN"
    SE_REG = "5XY0"
    LD_IMM = "6XNN"
    ADD_IMM = "7XNN"
    LD_REG = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD_REG = "8XY4"
    SUB = "8XY5"
    SHR = "8XY6"
    SUBN = "8XY7"
    SHL = "8XYE"
    SNE_REG = "9XY0"
    LD_I = "ANNN"
    JP_V0 = "BNNN"
    RND = "CXNN"
    DRW = "DXYN"
    SKP = "EX9E"
    SKNP = "EXA1"
    LD_VX_DT = "FX07"
    LD_VX_K = "FX0A"
    LD_DT_VX = "FX15"
    LD_ST_VX = "FX18"
    ADD_I = "FX1E"
    LD_F = "FX29"
    LD_B = "FX33"
    LD_MEM_VX = "FX55"
    LD_VX_MEM = "FX65"
    UNKNOWN = "????"


# Groups whose opcode is fully determined by the first nibble.
_SINGLE = {
    0x1: Opcode.JP,
    0x2: Opcode.CALL,
    0x3: Opcode.SE_IMM,
    0x4: Opcode.SNE_IMM,
    0x6: Opcode.LD_IMM,
    0x7: Opcode.ADD_IMM,
    0xA: Opcode.LD_I,
    0xB: Opcode.JP_V0,
    0xC: Opcode.RND,
    0xD: Opcode.DRW,
}

_ALU = {
    0x0: Opcode.LD_REG,
    0x1: Opcode.OR,
    0x2: Opcode.AND,
    0x3: Opcode.XOR,
    0x4: Opcode.ADD_REG,
    0x5: Opcode.SUB,
    0x6: Opcode.SHR,
    0x7: Opcode.SUBN,
    0xE: Opcode.SHL,
}

_KEY = {
    0x9E: Opcode.SKP,
    0xA1: Opcode.SKNP,
}

_MISC = {
    0x07: Opcode.LD_VX_DT,
    0x0A: Opcode.LD_VX_K,
    0x15: Opcode.LD_DT_VX,
    0x18: Opcode.LD_ST_VX,
    0x1E: Opcode.ADD_I,
    0x29: Opcode.LD_F,
    0x33: Opcode.LD_B,
    0x55: Opcode.LD_MEM_VX,
    0x65: Opcode.LD_VX_MEM,
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: Opcode
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def _resolve(group: int, n: int, nn: int, raw: int) -> Opcode:
    """Second-level dispatch from the group nibble to a concrete opcode."""
    if group in _SINGLE:
        return _SINGLE[group]
    if group == 0x0:
        if raw == 0x00E0:
            return Opcode.CLS
        if raw == 0x00EE:
            return Opcode.RET
        return Opcode.SYS
    if group == 0x5:
        return Opcode.SE_REG if n == 0 else Opcode.UNKNOWN
    if group == 0x9:
        return Opcode.SNE_REG if n == 0 else Opcode.UNKNOWN
    if group == 0x8:
        return _ALU.get(n, Opcode.UNKNOWN)
    if group == 0xE:
        return _KEY.get(nn, Opcode.UNKNOWN)
    return _MISC.get(nn, Opcode.UNKNOWN)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into opcode and operands."""
    instruction = int(instruction) & 0xFFFF
    group = (instruction & 0xF000) >> 12
    n = instruction & 0x000F
    nn = instruction & 0x00FF
    return DecodedInstruction(
        raw=instruction,
        op=_resolve(group, n, nn, instruction),
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=n,
        nn=nn,
        nnn=instruction & 0x0FFF,
    )


_MNEMONICS = {
    Opcode.SYS: "SYS 0x{nnn:03X}",
    Opcode.CLS: "CLS",
    Opcode.RET: "RET",
    Opcode.JP: "JP 0x{nnn:03X}",
    Opcode.CALL: "CALL 0x{nnn:03X}",
    Opcode.SE_IMM: "SE V{x:X}, 0x{nn:02X}",
    Opcode.SNE_IMM: "SNE V{x:X}, 0x{nn:02X}",
    Opcode.SE_REG: "SE V{x:X}, V{y:X}",
    Opcode.LD_IMM: "LD V{x:X}, 0x{nn:02X}",
    Opcode.ADD_IMM: "ADD V{x:X}, 0x{nn:02X}",
    Opcode.LD_REG: "LD V{x:X}, V{y:X}",
    Opcode.OR: "OR V{x:X}, V{y:X}",
    Opcode.AND: "AND V{x:X}, V{y:X}",
    Opcode.XOR: "XOR V{x:X}, V{y:X}",
    Opcode.ADD_REG: "ADD V{x:X}, V{y:X}",
    Opcode.SUB: "SUB V{x:X}, V{y:X}",
    Opcode.SHR: "SHR V{x:X}",
    Opcode.SUBN: "SUBN V{x:X}, V{y:X}",
    Opcode.SHL: "SHL V{x:X}",
    Opcode.SNE_REG: "SNE V{x:X}, V{y:X}",
    Opcode.LD_I: "LD I, 0x{nnn:03X}",
    Opcode.JP_V0: "JP V0, 0x{nnn:03X}",
    Opcode.RND: "RND V{x:X}, 0x{nn:02X}",
    Opcode.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Opcode.SKP: "SKP V{x:X}",
    Opcode.SKNP: "SKNP V{x:X}",
    Opcode.LD_VX_DT: "LD V{x:X}, DT",
    Opcode.LD_VX_K: "LD V{x:X}, K",
    Opcode.LD_DT_VX: "LD DT, V{x:X}",
    Opcode.LD_ST_VX: "LD ST, V{x:X}",
    Opcode.ADD_I: "ADD I, V{x:X}",
    Opcode.LD_F: "LD F, V{x:X}",
    Opcode.LD_B: "LD B, V{x:X}",
    Opcode.LD_MEM_VX: "LD [I], V{x:X}",
    Opcode.LD_VX_MEM: "LD V{x:X}, [I]",
    Opcode.UNKNOWN: "DW 0x{raw:04X}",
}


def disassemble(instruction: int) -> str:
    """Render an instruction word as an assembler mnemonic."""
    decoded = decode(instruction)
    return _MNEMONICS[decoded.op].format(
        raw=decoded.raw, x=decoded.x, y=decoded.y, n=decoded.n, nn=decoded.nn, nnn=decoded.nnn
    )
