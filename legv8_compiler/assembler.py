""" Assembler for the LEGv8 instruction set: source text -> ROM text. """
from dataclasses import dataclass

from .bits import bits_to_string
from .generator import generate_case_rom
from .parser import parse_lines, InstructionLine, Error

ERROR_MESSAGE = "Error on line {}"


@dataclass(frozen=True, eq=False)
class Assembly:
    """Result of assembling a whole program.

    Either ``error_lines`` is empty and ``words`` holds one 32-bit BitWord
    per instruction, or ``error_lines`` lists the failing 0-based line
    numbers and nothing was encoded.
    """
    words: tuple = ()
    error_lines: tuple = ()
    instructions: tuple = ()

    @property
    def ok(self):
        return not self.error_lines

    def error_text(self):
        # no separator between messages
        return "".join(ERROR_MESSAGE.format(n) for n in self.error_lines)

    def render(self):
        if not self.ok:
            return self.error_text()
        return generate_case_rom(self.words)


def assemble(text):
    """Parse every line, then encode only if no line failed."""
    lines = parse_lines(text)

    error_lines = tuple(n for n, line in enumerate(lines) if isinstance(line, Error))
    if error_lines:
        return Assembly(error_lines=error_lines)

    # Blank and Comment lines take no ROM address
    instructions = tuple(line.instruction for line in lines if isinstance(line, InstructionLine))
    words = tuple(instr.encode() for instr in instructions)
    return Assembly(words=words, instructions=instructions)


def parse_to_rom(text):
    """Single text-in/text-out entry point: a rom_case module, or the
    concatenated ``Error on line N`` markers."""
    return assemble(text).render()


def assemble_file(asm_file, verbose=False):
    with open(asm_file, encoding="utf-8") as f:
        text = f.read()

    assembly = assemble(text)
    if verbose:
        if assembly.ok:
            for address, (instr, word) in enumerate(zip(assembly.instructions, assembly.words)):
                print(f"Encoding {address:02}: '{instr}' -> '{bits_to_string(word)}'")
            print(f"✅ Assembled {len(assembly.words)} instructions from {asm_file}")
        else:
            print(f"❌ {len(assembly.error_lines)} line(s) failed in {asm_file}: "
                  f"{', '.join(str(n) for n in assembly.error_lines)}")
    return assembly
