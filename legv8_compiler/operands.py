"""operands.py - Operand types of the LEGv8 instruction set and their bit codecs.

Every codec is a pure mapping to a fixed-width BitWord: bit i of the field is
``(ordinal_or_value >> i) & 1``.
"""
from dataclasses import dataclass
from enum import IntEnum

from .bits import to_bits

REGISTER_BITS = 5
CONDITION_BITS = 5
SHIFT_BITS = 2

# X0..X30 keep their number, the zero register takes the last slot
Register = IntEnum(
    "Register",
    [(f"X{i}", i) for i in range(31)] + [("XZR", 31)],
)


class Condition(IntEnum):
    """Branch condition codes in encoding order."""
    EQ = 0   # equal
    NE = 1   # not equal
    HS = 2   # unsigned higher or same
    LO = 3   # unsigned lower
    MI = 4   # minus
    PL = 5   # plus or zero
    VS = 6   # signed overflow
    VC = 7   # no signed overflow
    HI = 8   # unsigned higher
    LS = 9   # unsigned lower or same
    GE = 10  # signed greater than or equal
    LT = 11  # signed less than
    GT = 12  # signed greater than
    LE = 13  # signed less than or equal
    AL = 14  # always
    NV = 15  # reserved


class ShiftAmount(IntEnum):
    """MOVZ/MOVK half-word shift; the ordinal is the 2-bit field value."""
    LSL_0 = 0
    LSL_16 = 1
    LSL_32 = 2
    LSL_48 = 3

    @property
    def amount(self):
        return self.value * 16


def register_bits(register):
    return to_bits(int(register), REGISTER_BITS)


def condition_bits(condition):
    return to_bits(int(condition), CONDITION_BITS)


def shift_bits(shift):
    return to_bits(int(shift), SHIFT_BITS)


@dataclass(frozen=True)
class Immediate:
    """A literal operand. The value is kept as written and only truncated
    to WIDTH bits when the instruction is encoded."""
    value: int

    WIDTH = 0
    # bits of the signed integer type the decimal text is parsed into
    CONTAINER_BITS = 0

    @classmethod
    def container_limit(cls):
        """Largest decimal magnitude the parser accepts for this width."""
        return (1 << (cls.CONTAINER_BITS - 1)) - 1

    def to_bits(self):
        return to_bits(self.value, self.WIDTH)


class Immediate6(Immediate):
    WIDTH = 6
    CONTAINER_BITS = 8


class Immediate9(Immediate):
    WIDTH = 9
    CONTAINER_BITS = 16


class Immediate12(Immediate):
    WIDTH = 12
    CONTAINER_BITS = 16


class Immediate16(Immediate):
    WIDTH = 16
    CONTAINER_BITS = 16


class Immediate19(Immediate):
    WIDTH = 19
    CONTAINER_BITS = 32


class Immediate26(Immediate):
    WIDTH = 26
    CONTAINER_BITS = 32
