""" LEGv8 assembler that compiles programs into a Verilog instruction ROM. """
from .assembler import Assembly, assemble, parse_to_rom

__all__ = ["Assembly", "assemble", "parse_to_rom"]
