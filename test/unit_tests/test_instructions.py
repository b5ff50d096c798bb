"""
Unit tests for the instruction encoder
======================================

Reference words are written MSB first, exactly as they appear in the ROM.
Operands follow one pattern per format:
  R      Rd=X3, Rn=X2, Rm=X1
  I      Rd=X3, Rn=X1, imm=3
  D      Rt=X2, Rn=X1, offset=4
  IM     Rd=X1, imm=5, LSL 16
  Shift  Rd=X2, Rn=X1, amount=6
  CB     Rt=X1, address=12
"""
import numpy as np
import pytest

from legv8_compiler import instructions as ins
from legv8_compiler.bits import bits_to_string, word_value
from legv8_compiler.instructions import OPCODES, VARIANTS, encode_instruction, encode_word
from legv8_compiler.operands import (
    Register as R, Condition, ShiftAmount,
    Immediate6, Immediate9, Immediate12, Immediate16, Immediate19, Immediate26,
)


def r_form(variant):
    return variant(destination=R.X3, n=R.X2, m=R.X1)


def i_form(variant):
    return variant(destination=R.X3, n=R.X1, immediate=Immediate12(3))


def d_form(variant):
    return variant(data=R.X2, address=R.X1, offset=Immediate9(4))


def im_form(variant):
    return variant(destination=R.X1, immediate=Immediate16(5), shift=ShiftAmount.LSL_16)


def shift_form(variant):
    return variant(destination=R.X2, n=R.X1, amount=Immediate6(6))


def cb_form(variant):
    return variant(register=R.X1, address=Immediate19(12))


REFERENCE_WORDS = [
    (r_form(ins.Add),                       "10001011000000010000000001000011"),
    (r_form(ins.Subtract),                  "11001011000000010000000001000011"),
    (r_form(ins.AddSetFlags),               "10101011000000010000000001000011"),
    (r_form(ins.SubtractSetFlags),          "11101011000000010000000001000011"),
    (r_form(ins.And),                       "10001010000000010000000001000011"),
    (r_form(ins.Or),                        "10101010000000010000000001000011"),
    (r_form(ins.Xor),                       "11001010000000010000000001000011"),
    (r_form(ins.AndSetFlags),               "11101010000000010000000001000011"),
    (i_form(ins.AddImmediate),              "10010001000000000000110000100011"),
    (i_form(ins.SubtractImmediate),         "11010001000000000000110000100011"),
    (i_form(ins.AddImmediateSetFlags),      "10110001000000000000110000100011"),
    (i_form(ins.SubtractImmediateSetFlags), "11110001000000000000110000100011"),
    (i_form(ins.AndImmediate),              "10010010000000000000110000100011"),
    (i_form(ins.OrImmediate),               "10110010000000000000110000100011"),
    (i_form(ins.XorImmediate),              "11010010000000000000110000100011"),
    (i_form(ins.AndImmediateSetFlags),      "11110010000000000000110000100011"),
    (d_form(ins.Store),                     "11111000000000000100000000100010"),
    (d_form(ins.Load),                      "11111000010000000100000000100010"),
    (d_form(ins.StoreByte),                 "00111000000000000100000000100010"),
    (d_form(ins.LoadByte),                  "00111000010000000100000000100010"),
    (im_form(ins.MoveZero),                 "11010010101000000000000010100001"),
    (im_form(ins.MoveKeep),                 "11110010101000000000000010100001"),
    (shift_form(ins.LogicalShiftRight),     "11010011010000000001100000100010"),
    (shift_form(ins.LogicalShiftLeft),      "11010011011000000001100000100010"),
    (cb_form(ins.CompareBranchZero),        "10110100000000000000000110000001"),
    (cb_form(ins.CompareBranchNotZero),     "10110101000000000000000110000001"),
    (ins.ConditionalBranch(condition=Condition.VC, address=Immediate19(12)),
                                            "01010100000000000000000110000111"),
    (ins.Branch(address=Immediate26(12)),   "00010100000000000000000000001100"),
    (ins.BranchLink(address=Immediate26(12)),
                                            "10010100000000000000000000001100"),
    (ins.BranchRegister(register=R.X1),     "11010110000000000000000000000001"),
]


@pytest.mark.parametrize("instr, expected", REFERENCE_WORDS,
                         ids=[instr.MNEMONIC for instr, _ in REFERENCE_WORDS])
def test_reference_encoding(instr, expected):
    assert bits_to_string(encode_instruction(instr)) == expected


def test_reference_table_covers_every_variant():
    assert {type(instr) for instr, _ in REFERENCE_WORDS} == set(VARIANTS.values())
    assert len(VARIANTS) == len(OPCODES) == 30


def test_encoding_is_deterministic():
    for instr, _ in REFERENCE_WORDS:
        np.testing.assert_array_equal(instr.encode(), instr.encode())


def test_encode_word_matches_bits():
    for instr, expected in REFERENCE_WORDS:
        assert encode_word(instr) == int(expected, 2)


def test_scenario_words():
    store = ins.Store(data=R.X23, address=R.X7, offset=Immediate9(50))
    addi = ins.AddImmediate(destination=R.X7, n=R.X7, immediate=Immediate12(1))
    assert bits_to_string(store.encode()) == "11111000000000110010000011110111"
    assert bits_to_string(addi.encode()) == "10010001000000000000010011100111"


def test_br_xzr_is_rom_default_word():
    assert encode_word(ins.BranchRegister(register=R.XZR)) == 0xD60003E0


@pytest.mark.parametrize("variant", [ins.Add, ins.Subtract, ins.Or, ins.AndSetFlags])
def test_r_format_destination_only_touches_low_bits(variant):
    base = variant(destination=R.X0, n=R.X5, m=R.X9).encode()
    for destination in R:
        word = variant(destination=destination, n=R.X5, m=R.X9).encode()
        np.testing.assert_array_equal(word[5:], base[5:])
        assert word_value(word[0:5]) == destination


def test_negative_offsets_are_twos_complement():
    word = ins.Load(data=R.X1, address=R.X2, offset=Immediate9(-1)).encode()
    assert bits_to_string(word)[11:20] == "111111111"
    word = ins.Branch(address=Immediate26(-2)).encode()
    assert bits_to_string(word) == "000101" + "1" * 25 + "0"


def test_out_of_width_immediate_truncates():
    wide = ins.AddImmediate(destination=R.X1, n=R.X1, immediate=Immediate12(4096 + 7))
    narrow = ins.AddImmediate(destination=R.X1, n=R.X1, immediate=Immediate12(7))
    np.testing.assert_array_equal(wide.encode(), narrow.encode())


def test_instructions_are_immutable():
    instr = ins.BranchRegister(register=R.X30)
    with pytest.raises(AttributeError):
        instr.register = R.X1


def test_variants_with_same_operands_differ():
    assert r_form(ins.Add) != r_form(ins.Subtract)
    assert r_form(ins.Add) == r_form(ins.Add)


def test_str_renders_assembly():
    assert str(r_form(ins.Add)) == "ADD X3, X2, X1"
    assert str(d_form(ins.Store)) == "STUR X2, [X1, 4]"
    assert str(im_form(ins.MoveZero)) == "MOVZ X1, 5, LSL 16"
    assert str(ins.MoveKeep(destination=R.X9, immediate=Immediate16(255))) == "MOVK X9, 255"
    assert str(ins.ConditionalBranch(condition=Condition.LT, address=Immediate19(25))) == "B.LT 25"
    assert str(ins.BranchRegister(register=R.XZR)) == "BR XZR"
