""" generator.py - Renders encoded instruction words for the hardware.

The main output is the ``rom_case`` Verilog module: a combinational case
statement mapping each 16-bit address to one 32-bit instruction. A plain
binary listing and a ``$readmemh`` hex image are also available.
All generate_* functions are pure; save_* functions write files.
"""
import numpy as np

from .bits import bits_to_string, is_bit_word, word_value
from .rom_config import RomConfig

_I1 = RomConfig.INDENT
_I2 = RomConfig.INDENT * 2
_I3 = RomConfig.INDENT * 3

ROM_HEADER = (
    f"module {RomConfig.MODULE_NAME}(out, address);\n"
    f"{_I1}output reg [{RomConfig.WORD_WIDTH - 1}:0] out;\n"
    f"{_I1}input [{RomConfig.ADDR_WIDTH - 1}:0] address;\n"
    f"{_I1}always @ (address) begin\n"
    f"{_I2}case (address)\n"
)

ROM_FOOTER = (
    f"{_I3}default: out = {RomConfig.WORD_WIDTH}'h{RomConfig.DEFAULT_WORD:08X}; "
    f"// {RomConfig.DEFAULT_COMMENT}\n"
    f"{_I2}endcase\n"
    f"{_I1}end\n"
    "end\n"
)


def _check_words(words):
    words = list(words)
    for i, word in enumerate(words):
        if not is_bit_word(word, RomConfig.WORD_WIDTH):
            raise ValueError(f"Word {i} is not a {RomConfig.WORD_WIDTH}-bit BitWord")
    return words


def rom_case_line(address, word):
    return (f"{_I3}{RomConfig.ADDR_WIDTH}'d{address}: "
            f"out = {RomConfig.WORD_WIDTH}'b{bits_to_string(word)};\n")


def generate_case_rom(words):
    """Render *words* (BitWords, LSB at index 0) as the rom_case module.

    Addresses are assigned 0, 1, 2, ... in order. The instruction count is
    not checked against the address width; see rom_overflow().
    """
    words = _check_words(words)
    cases = "".join(rom_case_line(i, word) for i, word in enumerate(words))
    return ROM_HEADER + cases + ROM_FOOTER


def generate_binary_str(words):
    """One 32-character MSB-first line per word."""
    return "".join(bits_to_string(word) + "\n" for word in _check_words(words))


def words_to_array(words):
    return np.array([word_value(word) for word in _check_words(words)], dtype=np.uint32)


def generate_hex_image(words):
    """One 8-digit hex word per line, readable by $readmemh."""
    return "".join(f"{val:08X}\n" for val in words_to_array(words))


def rom_overflow(words):
    """True when there are more words than the ROM has addresses."""
    return len(words) > RomConfig.ADDR_CAPACITY


def save_rom_to_file(words, filename="rom_case.v"):
    """Saves the rom_case module for *words* to a Verilog file."""
    with open(filename, "w", encoding="utf-8") as f:
        f.write(generate_case_rom(words))
    print(f"✅ ROM with {len(words)} instructions written to {filename}")


def save_hex_to_file(words, filename="program.hex"):
    """Saves the program as a hex image (one word per line)."""
    with open(filename, "w", encoding="utf-8") as f:
        f.write(generate_hex_image(words))
    print(f"✅ Hex image with {len(words)} words written to {filename}")
