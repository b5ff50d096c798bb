# ROM Configuration - instruction ROM generated for the LEGv8 single-cycle CPU
# Matches the port list of the rom_case module emitted by generator.py.
#
# The module decodes a 16-bit address, so at most ADDR_CAPACITY words are
# reachable. Longer programs are still rendered; main.py prints a warning.

class RomConfig:
    WORD_WIDTH = 32              # output reg [31:0] out
    ADDR_WIDTH = 16              # input [15:0] address
    ADDR_CAPACITY = 1 << 16      # 65536 addressable words

    MODULE_NAME = "rom_case"
    DEFAULT_WORD = 0xD60003E0    # BR XZR, returned for every unmapped address
    DEFAULT_COMMENT = "BR XZR"

    INDENT = "    "              # 4 spaces per Verilog nesting level
