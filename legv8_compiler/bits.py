"""bits.py - Bit primitives shared by the encoder and the ROM generator.

A BitWord(N) is a one-dimensional numpy uint8 array of length N holding only
0 and 1. Index 0 is the least significant bit, so ``word[0:5]`` is the low
five-bit field of an instruction and slices can be assigned the same way the
hardware fields are laid out.
"""
import numpy as np

BIT_DTYPE = np.uint8


def to_bits(value, width):
    """Return the low *width* bits of *value*, LSB first.

    Negative values use Python's infinite two's complement, so -5 in six
    bits is [1, 1, 0, 1, 1, 1]. Values wider than *width* are truncated.
    """
    return np.array([(value >> i) & 1 for i in range(width)], dtype=BIT_DTYPE)


def zero_word(width=32):
    return np.zeros(width, dtype=BIT_DTYPE)


def place(word, start, bits):
    """Copy *bits* into *word* starting at bit index *start* (in place)."""
    word[start:start + len(bits)] = bits
    return word


def word_value(bits):
    """Unsigned integer value of a BitWord."""
    # packbits pads the last byte with zeros on the high side
    packed = np.packbits(np.asarray(bits, dtype=BIT_DTYPE), bitorder="little")
    return int.from_bytes(packed.tobytes(), "little")


def bits_to_string(bits):
    """Render a BitWord MSB first, e.g. '0101' for bits [1, 0, 1, 0]."""
    return "".join("1" if b else "0" for b in bits[::-1])


def is_bit_word(bits, width=None):
    """True when *bits* is a 1-D array of 0/1 values (of *width*, if given)."""
    if not isinstance(bits, np.ndarray) or bits.ndim != 1:
        return False
    if width is not None and bits.shape[0] != width:
        return False
    return bool(np.all((bits == 0) | (bits == 1)))
