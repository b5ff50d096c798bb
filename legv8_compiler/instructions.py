"""instructions.py - The LEGv8 instruction model and its bit-exact encoder.

Each mnemonic is a frozen dataclass. Variants that share an operand shape
share a base class, and the base class names the bit layout (format) the
encoder uses. Encoding is total: any well-typed instruction maps to exactly
one 32-bit BitWord.

Format layouts, bit 0 = LSB, unlisted bits are zero:

    R       [0,5) Rd   [5,10) Rn   [16,21) Rm          [21,32) opcode
    I       [0,5) Rd   [5,10) Rn   [10,22) imm12       [22,32) opcode
    D       [0,5) Rt   [5,10) Rn   [12,21) imm9        [21,32) opcode
    IM      [0,5) Rd   [5,21) imm16  [21,23) shift     [23,32) opcode
    Shift   [0,5) Rd   [5,10) Rn   [10,16) imm6        [21,32) opcode
    CB      [0,5) Rt   [5,24) imm19                    [24,32) opcode
    B.cond  [0,5) cond [5,24) imm19                    [24,32) opcode
    B       [0,26) imm26                               [26,32) opcode
    BR      [0,5) Rn                                   [21,32) opcode
"""
from dataclasses import dataclass

from .bits import to_bits, zero_word, place, word_value
from .operands import (
    Register, Condition, ShiftAmount,
    Immediate6, Immediate9, Immediate12, Immediate16, Immediate19, Immediate26,
    register_bits, condition_bits, shift_bits,
)

WORD_BITS = 32

# === Define opcode mapping ===
# mnemonic -> (opcode, format); opcodes are written MSB first
OPCODES = {
    # R-format
    "ADD":    (0b10001011000, "R"),
    "SUB":    (0b11001011000, "R"),
    "ADDS":   (0b10101011000, "R"),
    "SUBS":   (0b11101011000, "R"),
    "AND":    (0b10001010000, "R"),
    "ORR":    (0b10101010000, "R"),
    "EOR":    (0b11001010000, "R"),
    "ANDS":   (0b11101010000, "R"),
    # I-format
    "ADDI":   (0b1001000100, "I"),
    "SUBI":   (0b1101000100, "I"),
    "ADDIS":  (0b1011000100, "I"),
    "SUBIS":  (0b1111000100, "I"),
    "ANDI":   (0b1001001000, "I"),
    "ORRI":   (0b1011001000, "I"),
    "EORI":   (0b1101001000, "I"),
    "ANDIS":  (0b1111001000, "I"),
    # D-format
    "STUR":   (0b11111000000, "D"),
    "LDUR":   (0b11111000010, "D"),
    "STURB":  (0b00111000000, "D"),
    "LDURB":  (0b00111000010, "D"),
    # IM-format
    "MOVZ":   (0b110100101, "IM"),
    "MOVK":   (0b111100101, "IM"),
    # Shift
    "LSR":    (0b11010011010, "Shift"),
    "LSL":    (0b11010011011, "Shift"),
    # CB-format
    "CBZ":    (0b10110100, "CB"),
    "CBNZ":   (0b10110101, "CB"),
    "B.cond": (0b01010100, "B.cond"),
    # B-format
    "B":      (0b000101, "B"),
    "BL":     (0b100101, "B"),
    # BR
    "BR":     (0b11010110000, "BR"),
}

# format -> (first opcode bit, opcode width)
OPCODE_FIELDS = {
    "R":      (21, 11),
    "I":      (22, 10),
    "D":      (21, 11),
    "IM":     (23, 9),
    "Shift":  (21, 11),
    "CB":     (24, 8),
    "B.cond": (24, 8),
    "B":      (26, 6),
    "BR":     (21, 11),
}


@dataclass(frozen=True)
class Instruction:
    MNEMONIC = ""
    FORMAT = ""

    def encode(self):
        return encode_instruction(self)


# --- Operand shapes -------------------------------------------------------

@dataclass(frozen=True)
class RegisterInstruction(Instruction):
    FORMAT = "R"
    destination: Register
    n: Register
    m: Register

    def __str__(self):
        return f"{self.MNEMONIC} {self.destination.name}, {self.n.name}, {self.m.name}"


@dataclass(frozen=True)
class ImmediateInstruction(Instruction):
    FORMAT = "I"
    destination: Register
    n: Register
    immediate: Immediate12

    def __str__(self):
        return f"{self.MNEMONIC} {self.destination.name}, {self.n.name}, {self.immediate.value}"


@dataclass(frozen=True)
class MemoryInstruction(Instruction):
    FORMAT = "D"
    data: Register
    address: Register
    offset: Immediate9

    def __str__(self):
        return f"{self.MNEMONIC} {self.data.name}, [{self.address.name}, {self.offset.value}]"


@dataclass(frozen=True)
class MoveInstruction(Instruction):
    FORMAT = "IM"
    destination: Register
    immediate: Immediate16
    shift: ShiftAmount = ShiftAmount.LSL_0

    def __str__(self):
        text = f"{self.MNEMONIC} {self.destination.name}, {self.immediate.value}"
        if self.shift != ShiftAmount.LSL_0:
            text += f", LSL {self.shift.amount}"
        return text


@dataclass(frozen=True)
class ShiftInstruction(Instruction):
    FORMAT = "Shift"
    destination: Register
    n: Register
    amount: Immediate6

    def __str__(self):
        return f"{self.MNEMONIC} {self.destination.name}, {self.n.name}, {self.amount.value}"


@dataclass(frozen=True)
class CompareBranchInstruction(Instruction):
    FORMAT = "CB"
    register: Register
    address: Immediate19

    def __str__(self):
        return f"{self.MNEMONIC} {self.register.name}, {self.address.value}"


# --- Variants -------------------------------------------------------------

class Add(RegisterInstruction):
    MNEMONIC = "ADD"


class Subtract(RegisterInstruction):
    MNEMONIC = "SUB"


class AddSetFlags(RegisterInstruction):
    MNEMONIC = "ADDS"


class SubtractSetFlags(RegisterInstruction):
    MNEMONIC = "SUBS"


class And(RegisterInstruction):
    MNEMONIC = "AND"


class Or(RegisterInstruction):
    MNEMONIC = "ORR"


class Xor(RegisterInstruction):
    MNEMONIC = "EOR"


class AndSetFlags(RegisterInstruction):
    MNEMONIC = "ANDS"


class AddImmediate(ImmediateInstruction):
    MNEMONIC = "ADDI"


class SubtractImmediate(ImmediateInstruction):
    MNEMONIC = "SUBI"


class AddImmediateSetFlags(ImmediateInstruction):
    MNEMONIC = "ADDIS"


class SubtractImmediateSetFlags(ImmediateInstruction):
    MNEMONIC = "SUBIS"


class AndImmediate(ImmediateInstruction):
    MNEMONIC = "ANDI"


class OrImmediate(ImmediateInstruction):
    MNEMONIC = "ORRI"


class XorImmediate(ImmediateInstruction):
    MNEMONIC = "EORI"


class AndImmediateSetFlags(ImmediateInstruction):
    MNEMONIC = "ANDIS"


class Store(MemoryInstruction):
    MNEMONIC = "STUR"


class Load(MemoryInstruction):
    MNEMONIC = "LDUR"


class StoreByte(MemoryInstruction):
    MNEMONIC = "STURB"


class LoadByte(MemoryInstruction):
    MNEMONIC = "LDURB"


class MoveZero(MoveInstruction):
    MNEMONIC = "MOVZ"


class MoveKeep(MoveInstruction):
    MNEMONIC = "MOVK"


class LogicalShiftRight(ShiftInstruction):
    MNEMONIC = "LSR"


class LogicalShiftLeft(ShiftInstruction):
    MNEMONIC = "LSL"


class CompareBranchZero(CompareBranchInstruction):
    MNEMONIC = "CBZ"


class CompareBranchNotZero(CompareBranchInstruction):
    MNEMONIC = "CBNZ"


@dataclass(frozen=True)
class ConditionalBranch(Instruction):
    MNEMONIC = "B.cond"
    FORMAT = "B.cond"
    condition: Condition
    address: Immediate19

    def __str__(self):
        return f"B.{self.condition.name} {self.address.value}"


@dataclass(frozen=True)
class Branch(Instruction):
    MNEMONIC = "B"
    FORMAT = "B"
    address: Immediate26

    def __str__(self):
        return f"{self.MNEMONIC} {self.address.value}"


class BranchLink(Branch):
    MNEMONIC = "BL"


@dataclass(frozen=True)
class BranchRegister(Instruction):
    MNEMONIC = "BR"
    FORMAT = "BR"
    register: Register

    def __str__(self):
        return f"{self.MNEMONIC} {self.register.name}"


def _variants(cls=Instruction):
    """All concrete instruction classes (the ones that name a mnemonic)."""
    found = []
    for sub in cls.__subclasses__():
        if sub.MNEMONIC:
            found.append(sub)
        found.extend(_variants(sub))
    return found


VARIANTS = {cls.MNEMONIC: cls for cls in _variants()}

# Every variant needs an opcode of its own format and vice versa
assert set(VARIANTS) == set(OPCODES), sorted(set(VARIANTS) ^ set(OPCODES))
assert all(OPCODES[m][1] == cls.FORMAT for m, cls in VARIANTS.items())


# --- Encoder --------------------------------------------------------------

def _encode_r(instr, word):
    place(word, 0, register_bits(instr.destination))
    place(word, 5, register_bits(instr.n))
    place(word, 16, register_bits(instr.m))


def _encode_i(instr, word):
    place(word, 0, register_bits(instr.destination))
    place(word, 5, register_bits(instr.n))
    place(word, 10, instr.immediate.to_bits())


def _encode_d(instr, word):
    place(word, 0, register_bits(instr.data))
    place(word, 5, register_bits(instr.address))
    place(word, 12, instr.offset.to_bits())


def _encode_im(instr, word):
    place(word, 0, register_bits(instr.destination))
    place(word, 5, instr.immediate.to_bits())
    place(word, 21, shift_bits(instr.shift))


def _encode_shift(instr, word):
    place(word, 0, register_bits(instr.destination))
    place(word, 5, register_bits(instr.n))
    place(word, 10, instr.amount.to_bits())


def _encode_cb(instr, word):
    place(word, 0, register_bits(instr.register))
    place(word, 5, instr.address.to_bits())


def _encode_b_cond(instr, word):
    place(word, 0, condition_bits(instr.condition))
    place(word, 5, instr.address.to_bits())


def _encode_b(instr, word):
    place(word, 0, instr.address.to_bits())


def _encode_br(instr, word):
    place(word, 0, register_bits(instr.register))


FORMAT_ENCODERS = {
    "R": _encode_r,
    "I": _encode_i,
    "D": _encode_d,
    "IM": _encode_im,
    "Shift": _encode_shift,
    "CB": _encode_cb,
    "B.cond": _encode_b_cond,
    "B": _encode_b,
    "BR": _encode_br,
}

assert set(FORMAT_ENCODERS) == set(OPCODE_FIELDS)


def encode_instruction(instr):
    """Encode *instr* into a 32-bit BitWord (index 0 = LSB)."""
    opcode, fmt = OPCODES[instr.MNEMONIC]
    start, width = OPCODE_FIELDS[fmt]
    word = zero_word(WORD_BITS)
    FORMAT_ENCODERS[fmt](instr, word)
    place(word, start, to_bits(opcode, width))
    return word


def encode_word(instr):
    """Encode *instr* and return the word as an unsigned integer."""
    return word_value(encode_instruction(instr))
