"""
main.py - Command line front end for the LEGv8 ROM compiler.

Usage:
    legv8-rom program.asm                      # rom_case module to stdout
    legv8-rom program.asm -o rom_case.v        # ... or to a file
    legv8-rom program.asm --format hex -o program.hex
    legv8-rom program.hex --disassemble        # hex image back to assembly
"""
import argparse
import sys

from .assembler import assemble_file
from .disassembler import disassemble_file
from .generator import (
    generate_case_rom, generate_binary_str, generate_hex_image,
    rom_overflow, save_rom_to_file, save_hex_to_file,
)
from .rom_config import RomConfig

RENDERERS = {
    "case": generate_case_rom,
    "binary": generate_binary_str,
    "hex": generate_hex_image,
}


def build_parser():
    parser = argparse.ArgumentParser(
        prog="legv8-rom",
        description="Compile LEGv8 assembly into a Verilog instruction ROM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s program.asm                    Print the rom_case module
  %(prog)s program.asm -o rom_case.v      Write it to a file
  %(prog)s program.asm --format binary    One 32-bit binary word per line
  %(prog)s program.hex --disassemble      Hex image back to assembly
        """
    )
    parser.add_argument("source",
                        help="Assembly source (or hex image with --disassemble)")
    parser.add_argument("-o", "--output", default=None,
                        help="Output file (default: stdout)")
    parser.add_argument("--format", choices=sorted(RENDERERS), default="case",
                        help="Output format (default: case)")
    parser.add_argument("--disassemble", action="store_true",
                        help="Treat source as a hex image and print assembly")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print every encoded instruction")
    return parser


def run_disassembler(args):
    lines = disassemble_file(args.source, args.output)
    if not args.output:
        sys.stdout.write("".join(f"{line}\n" for line in lines))
    return 0


def run_assembler(args):
    assembly = assemble_file(args.source, verbose=args.verbose)
    if not assembly.ok:
        print(assembly.error_text(), file=sys.stderr)
        return 1

    if rom_overflow(assembly.words):
        print(f"⚠️ Warning: {len(assembly.words)} instructions exceed the "
              f"{RomConfig.ADDR_CAPACITY} addresses of a {RomConfig.ADDR_WIDTH}-bit ROM",
              file=sys.stderr)

    if args.output is None:
        sys.stdout.write(RENDERERS[args.format](assembly.words))
    elif args.format == "case":
        save_rom_to_file(assembly.words, args.output)
    elif args.format == "hex":
        save_hex_to_file(assembly.words, args.output)
    else:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(generate_binary_str(assembly.words))
        print(f"✅ Binary listing with {len(assembly.words)} words written to {args.output}")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        if args.disassemble:
            return run_disassembler(args)
        return run_assembler(args)
    except (OSError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
