# disassembler.py
""" Turns 32-bit LEGv8 words back into assembly text. """
from .instructions import OPCODES, OPCODE_FIELDS, VARIANTS
from .operands import (
    Register, Condition, ShiftAmount,
    Immediate6, Immediate9, Immediate12, Immediate16, Immediate19, Immediate26,
)

# (opcode width, opcode) -> mnemonic
_DECODE_TABLE = {
    (OPCODE_FIELDS[fmt][1], opcode): mnemonic
    for mnemonic, (opcode, fmt) in OPCODES.items()
}
# longest opcodes first: 11, 10, 9, 8, 6
_OPCODE_WIDTHS = sorted({width for width, _ in _DECODE_TABLE}, reverse=True)


def _sign_extend(value, bits):
    sign_bit = 1 << (bits - 1)
    return (value & (sign_bit - 1)) - (value & sign_bit)


def _field(word, start, width):
    return (word >> start) & ((1 << width) - 1)


def find_mnemonic(word):
    for width in _OPCODE_WIDTHS:
        mnemonic = _DECODE_TABLE.get((width, word >> (32 - width)))
        if mnemonic is not None:
            return mnemonic
    return None


def decode_word(word):
    """Rebuild the Instruction for *word*, or None for an unknown opcode."""
    mnemonic = find_mnemonic(word)
    if mnemonic is None:
        return None
    variant = VARIANTS[mnemonic]
    fmt = variant.FORMAT
    rd = Register(word & 0x1F)     # Rd / Rt, low 5 bits
    rn = Register(_field(word, 5, 5))

    if fmt == "R":
        return variant(destination=rd, n=rn, m=Register(_field(word, 16, 5)))

    elif fmt == "I":
        return variant(destination=rd, n=rn, immediate=Immediate12(_field(word, 10, 12)))

    elif fmt == "D":
        offset = _sign_extend(_field(word, 12, 9), 9)
        return variant(data=rd, address=rn, offset=Immediate9(offset))

    elif fmt == "IM":
        value = _sign_extend(_field(word, 5, 16), 16)
        return variant(destination=rd, immediate=Immediate16(value),
                       shift=ShiftAmount(_field(word, 21, 2)))

    elif fmt == "Shift":
        return variant(destination=rd, n=rn, amount=Immediate6(_field(word, 10, 6)))

    elif fmt == "CB":
        address = _sign_extend(_field(word, 5, 19), 19)
        return variant(register=rd, address=Immediate19(address))

    elif fmt == "B.cond":
        condition = word & 0x1F
        if condition > max(Condition):
            return None
        address = _sign_extend(_field(word, 5, 19), 19)
        return variant(condition=Condition(condition), address=Immediate19(address))

    elif fmt == "B":
        return variant(address=Immediate26(_sign_extend(_field(word, 0, 26), 26)))

    else:  # BR
        return variant(register=rd)


def decode_instruction(word):
    instr = decode_word(word)
    if instr is None:
        return f"UNKNOWN_OPCODE_{word:08X}"
    return str(instr)


def disassemble_file(hex_file, out_file=None):
    """Disassemble a hex image (one word per line) and optionally write the
    listing to *out_file*. Returns the decoded lines."""
    with open(hex_file, encoding="utf-8") as f:
        lines = [line.strip() for line in f if line.strip()]

    decoded_lines = []
    for i, line in enumerate(lines):
        decoded = decode_instruction(int(line, 16))
        decoded_lines.append(decoded)
        if out_file:
            print(f"{i:02}: {line} -> {decoded}")

    if out_file:
        with open(out_file, "w", encoding="utf-8") as out:
            out.write("".join(f"{decoded}\n" for decoded in decoded_lines))
        print(f"\n✅ Disassembly complete: {out_file}")
    return decoded_lines
