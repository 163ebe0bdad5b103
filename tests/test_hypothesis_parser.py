import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from jvm_bytecode.analysis.instruction_parser import parse_instructions, split_lines
from jvm_bytecode.core.instruction import ConstantParam, NumericParam, StringParam
from jvm_bytecode.core.opcodes import Opcode

# Operand tokens in the three shapes javap prints
constant_strategy = st.integers(min_value=1, max_value=65535).map(lambda i: ConstantParam(f"#{i}"))
numeric_strategy = st.integers(min_value=-(2 ** 31), max_value=2 ** 31 - 1).map(NumericParam)
symbol_strategy = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=12).map(StringParam)
param_strategy = st.one_of(constant_strategy, numeric_strategy, symbol_strategy)

# Comments never contain line breaks
comment_strategy = st.text(alphabet=string.ascii_letters + string.digits + " :;/.()[]$<>\"", max_size=60)


@composite
def instruction_line(draw):
    """Generate a javap line together with the values it should parse to."""
    offset = draw(st.integers(min_value=0, max_value=65535))
    opcode = draw(st.sampled_from(list(Opcode)))
    params = draw(st.lists(param_strategy, max_size=3))
    comment = draw(st.one_of(st.none(), comment_strategy))
    indent = draw(st.sampled_from(["", "   ", "      "]))

    line = f"{indent}{offset}: {opcode.mnemonic}"
    if params:
        line += " " + ", ".join(str(p) for p in params)
    if comment is not None:
        line += " // " + comment

    expected_comment = comment.strip() if comment is not None and comment.strip() else None
    return line, (offset, opcode, tuple(params), expected_comment)


# Lines without digits can never match the instruction grammar
garbage_line = st.text(alphabet=string.ascii_letters + " {}:;()", max_size=40)


@settings(max_examples=300, deadline=None)
@given(line_info=instruction_line())
def test_parse_generated_line(line_info):
    """Test that every generated instruction line parses to its source values."""
    line, (offset, opcode, params, comment) = line_info

    result = parse_instructions(line)

    assert result.ok, f"Unexpected diagnostics for {line!r}: {result.diagnostics}"
    assert len(result) == 1
    instr = result[0]
    assert instr.offset == offset
    assert instr.opcode is opcode
    assert instr.parameters == params
    assert instr.comment == comment


@settings(max_examples=200, deadline=None)
@given(lines=st.lists(instruction_line(), max_size=20))
def test_parse_block_preserves_order(lines):
    block = "\n".join(line for line, _ in lines)

    result = parse_instructions(block)

    assert [(i.offset, i.opcode) for i in result] == [(exp[0], exp[1]) for _, exp in lines]
    # Idempotent
    assert parse_instructions(block) == result


@settings(max_examples=200, deadline=None)
@given(
    lines=st.lists(st.tuples(st.booleans(), instruction_line(), garbage_line), min_size=1, max_size=20)
)
def test_garbage_lines_never_abort_parsing(lines):
    """Test that interleaved non-instruction lines are skipped and reported."""
    block_lines = []
    expected = []
    garbage_count = 0
    for is_garbage, (line, values), garbage in lines:
        if is_garbage:
            block_lines.append(garbage)
            garbage_count += 1
        else:
            block_lines.append(line)
            expected.append(values[0])

    try:
        result = parse_instructions("\n".join(block_lines))
    except Exception as e:
        pytest.fail(f"parse_instructions raised {type(e).__name__}: {e}")

    assert [i.offset for i in result] == expected
    # A trailing empty garbage line is not a line at all
    trailing_empty = 1 if block_lines and block_lines[-1] == "" else 0
    assert garbage_count - trailing_empty <= len(result.diagnostics) <= garbage_count


@settings(max_examples=200, deadline=None)
@given(text=st.text(max_size=300))
def test_parse_does_not_crash_random_text(text):
    result = parse_instructions(text)

    assert len(result) + len(result.diagnostics) == len(split_lines(text))
