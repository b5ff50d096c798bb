"""parser.py - Line parser for LEGv8 assembly.

Each source line is classified on its own as an instruction, a blank line or
an error. There is no label table and no state shared between lines.

The grammar is written as small combinators. Every combinator takes the
unparsed text and returns a ``(value, remainder)`` pair, or raises
ParseError when the text does not match.
"""
import re
from dataclasses import dataclass
from typing import Union

from .instructions import (
    Instruction, VARIANTS, ConditionalBranch, Branch,
)
from .operands import (
    Register, Condition, ShiftAmount,
    Immediate9, Immediate12, Immediate16, Immediate19, Immediate26, Immediate6,
)

WHITESPACE = " \t\r\n"
DIGITS_RE = re.compile(r"[0-9]+")
MNEMONIC_SEPARATORS = " ."


class ParseError(ValueError):
    """Raised by the combinators when the text does not match."""
    pass


# === Line classification ===

@dataclass(frozen=True)
class InstructionLine:
    instruction: Instruction


@dataclass(frozen=True)
class Blank:
    pass


@dataclass(frozen=True)
class Comment:
    # Part of the line model, but no grammar rule produces it
    text: str


@dataclass(frozen=True)
class Error:
    pass


AsmLine = Union[InstructionLine, Blank, Comment, Error]


# === Primitive combinators ===

def skip_whitespace(text):
    return text.lstrip(WHITESPACE)


def tag(literal, text):
    if not text.startswith(literal):
        raise ParseError(f"Expected '{literal}' at '{text}'")
    return literal, text[len(literal):]


def ws(parser):
    """Wrap *parser* so whitespace before and after it is consumed."""
    def parse(text):
        value, rest = parser(skip_whitespace(text))
        return value, skip_whitespace(rest)
    return parse


def ws_tag(literal):
    return ws(lambda text: tag(literal, text))


def digits(text):
    match = DIGITS_RE.match(text)
    if not match:
        raise ParseError(f"Expected digits at '{text}'")
    return match.group(), text[match.end():]


def take(count, text):
    if len(text) < count:
        raise ParseError(f"Expected {count} characters at '{text}'")
    return text[:count], text[count:]


def sequence(text, *parsers):
    """Run *parsers* one after another, returning all values and the rest."""
    values = []
    for parser in parsers:
        value, text = parser(text)
        values.append(value)
    return values, text


# === Operands ===

REGISTER_NAMES = {str(i): Register[f"X{i}"] for i in range(31)}
REGISTER_NAMES["ZR"] = Register.XZR


def parse_register(text):
    """``X0`` .. ``X30`` or ``XZR``."""
    _, rest = tag("X", text)
    if rest.startswith("ZR"):
        name, rest = tag("ZR", rest)
    else:
        name, rest = digits(rest)
    if name not in REGISTER_NAMES:
        raise ParseError(f"Unknown register 'X{name}'")
    return REGISTER_NAMES[name], rest


def immediate(kind):
    """Parser for a signed decimal literal of the Immediate subclass *kind*.

    The magnitude must fit the integer container of that width; the value
    is not checked against the field width itself.
    """
    def parse(text):
        negative = text.startswith("-")
        if negative:
            text = text[1:]
        number, rest = digits(text)
        limit = kind.container_limit()
        # leading zeros are allowed; too many significant digits never reach int()
        significant = number.lstrip("0") or "0"
        if len(significant) > len(str(limit)):
            raise ParseError(f"Immediate does not fit {kind.__name__}")
        value = int(significant)
        if value > limit:
            raise ParseError(f"Immediate {value} does not fit {kind.__name__}")
        return kind(-value if negative else value), rest
    return parse


CONDITION_CODES = {condition.name: condition for condition in Condition}


def parse_condition(text):
    code, rest = take(2, text)
    if code not in CONDITION_CODES:
        raise ParseError(f"Unknown condition '{code}'")
    return CONDITION_CODES[code], rest


SHIFT_AMOUNTS = {str(shift.amount): shift for shift in ShiftAmount}


def parse_shift(text):
    """``LSL 0`` / ``LSL 16`` / ``LSL 32`` / ``LSL 48``."""
    _, rest = ws_tag("LSL")(text)
    amount, rest = digits(rest)
    if amount not in SHIFT_AMOUNTS:
        raise ParseError(f"Invalid shift amount {amount}")
    return SHIFT_AMOUNTS[amount], rest


def optional_shift(text):
    """An optional ``, LSL <n>`` suffix, defaulting to no shift."""
    try:
        (_, shift), rest = sequence(text, ws_tag(","), parse_shift)
    except ParseError:
        return ShiftAmount.LSL_0, text
    return shift, rest


# === Operand grammars, one per instruction format ===

comma = ws_tag(",")


def parse_r(variant, text):
    # Rd, Rn, Rm
    (d, _, n, _, m), rest = sequence(
        text, parse_register, comma, parse_register, comma, parse_register)
    return variant(destination=d, n=n, m=m), rest


def parse_i(variant, text):
    # Rd, Rn, imm12
    (d, _, n, _, i), rest = sequence(
        text, parse_register, comma, parse_register, comma, immediate(Immediate12))
    return variant(destination=d, n=n, immediate=i), rest


def parse_d(variant, text):
    # Rt, [Rn, imm9]
    (t, _, _, n, _, offset, _), rest = sequence(
        text, parse_register, comma, ws_tag("["), parse_register, comma,
        immediate(Immediate9), ws_tag("]"))
    return variant(data=t, address=n, offset=offset), rest


def parse_im(variant, text):
    # Rd, imm16 [, LSL n]
    (d, _, i, shift), rest = sequence(
        text, parse_register, comma, immediate(Immediate16), optional_shift)
    return variant(destination=d, immediate=i, shift=shift), rest


def parse_shift_format(variant, text):
    # Rd, Rn, imm6
    (d, _, n, _, amount), rest = sequence(
        text, parse_register, comma, parse_register, comma, immediate(Immediate6))
    return variant(destination=d, n=n, amount=amount), rest


def parse_cb(variant, text):
    # Rt, imm19
    (t, _, address), rest = sequence(
        text, parse_register, comma, immediate(Immediate19))
    return variant(register=t, address=address), rest


def parse_b(variant, text):
    # imm26
    address, rest = immediate(Immediate26)(text)
    return variant(address=address), rest


def parse_br(variant, text):
    # Rn
    register, rest = parse_register(text)
    return variant(register=register), rest


def parse_branch(text):
    """Operands of ``B``: ``<cond> <imm19>`` first, else a bare imm26.

    ``B.LT 25`` reaches here as ``LT 25`` because the mnemonic stops at
    the dot.
    """
    try:
        (condition, address), rest = sequence(
            text, ws(parse_condition), ws(immediate(Immediate19)))
        return ConditionalBranch(condition=condition, address=address), rest
    except ParseError:
        address, rest = ws(immediate(Immediate26))(text)
        return Branch(address=address), rest


FORMAT_GRAMMARS = {
    "R": parse_r,
    "I": parse_i,
    "D": parse_d,
    "IM": parse_im,
    "Shift": parse_shift_format,
    "CB": parse_cb,
    "B": parse_b,
    "BR": parse_br,
}

# mnemonic -> operand parser; "B" covers both B and B.cond
GRAMMARS = {
    mnemonic: (lambda text, v=variant: FORMAT_GRAMMARS[v.FORMAT](v, text))
    for mnemonic, variant in VARIANTS.items()
    if variant.FORMAT in FORMAT_GRAMMARS
}
GRAMMARS["B"] = parse_branch


def parse_mnemonic(text):
    """Text before the first space or '.', with that separator consumed."""
    positions = [text.find(sep) for sep in MNEMONIC_SEPARATORS if sep in text]
    if not positions:
        raise ParseError(f"No mnemonic separator in '{text}'")
    end = min(positions)
    return text[:end], text[end + 1:]


def parse_instruction(text):
    mnemonic, rest = parse_mnemonic(text)
    grammar = GRAMMARS.get(mnemonic)
    if grammar is None:
        raise ParseError(f"Unknown instruction: {mnemonic}")
    return grammar(rest)


def parse_line(line):
    """Classify one source line.

    Text left over after a complete instruction is ignored.
    """
    try:
        instruction, _ = parse_instruction(line)
    except ParseError:
        if not skip_whitespace(line):
            return Blank()
        return Error()
    return InstructionLine(instruction)


def split_lines(text):
    """Split on '\\n', drop one trailing '\\r' per line, and do not count a
    final newline as an extra empty line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_lines(text):
    """One AsmLine per source line, in source order."""
    return [parse_line(line) for line in split_lines(text)]
