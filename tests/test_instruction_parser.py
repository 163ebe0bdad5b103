import pytest
from jvm_bytecode.analysis.instruction_parser import (
    REASON_EMPTY_PARAMETER,
    REASON_UNKNOWN_MNEMONIC,
    REASON_UNPARSEABLE,
    ParseResult,
    classify_parameter,
    parse_instructions,
    parse_line,
    split_lines,
)
from jvm_bytecode.core.instruction import ConstantParam, Instruction, NumericParam, StringParam
from jvm_bytecode.core.opcodes import Opcode

HELLO_WORLD = """\
  public static void main(java.lang.String[]);
    Code:
       0: getstatic     #2                  // Field java/lang/System.out:Ljava/io/PrintStream;
       3: ldc           #3                  // String Hello
       5: invokevirtual #4                  // Method java/io/PrintStream.println:(Ljava/lang/String;)V
       8: return
"""


def test_parse_single_no_params():
    """Test a bare instruction."""
    result = parse_instructions("0: iconst_0")

    assert len(result) == 1
    instr = result[0]
    assert instr.offset == 0
    assert instr.opcode is Opcode.ICONST_0
    assert instr.parameters == ()
    assert instr.comment is None
    assert result.ok


def test_parse_constant_and_comment():
    result = parse_instructions("5: invokevirtual #2 // Method someMethod:()V")

    assert len(result) == 1
    instr = result[0]
    assert instr.offset == 5
    assert instr.opcode is Opcode.INVOKEVIRTUAL
    assert instr.parameters == (ConstantParam("#2"),)
    assert instr.comment == "Method someMethod:()V"


def test_parse_numeric_params_in_order():
    result = parse_instructions("3: iload 1, 2")

    assert result[0].parameters == (NumericParam(1), NumericParam(2))


def test_parse_javap_method_body():
    """Test a real javap listing: header lines are skipped, instructions kept."""
    result = parse_instructions(HELLO_WORLD)

    assert [i.offset for i in result] == [0, 3, 5, 8]
    assert [i.mnemonic for i in result] == ["getstatic", "ldc", "invokevirtual", "return"]
    assert result[0].comment == "Field java/lang/System.out:Ljava/io/PrintStream;"
    assert result[1].parameters == (ConstantParam("#3"),)
    assert result[3].parameters == ()

    # The method header and "Code:" are reported, not raised
    assert [d.line_number for d in result.diagnostics] == [1, 2]
    assert all(d.reason == REASON_UNPARSEABLE for d in result.diagnostics)


def test_garbage_line_is_skipped():
    result = parse_instructions("0: aload_0\ngarbage text\n1: areturn")

    assert len(result) == 2
    assert result[0].opcode is Opcode.ALOAD_0
    assert result[1].opcode is Opcode.ARETURN
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].line == "garbage text"
    assert result.diagnostics[0].line_number == 2


def test_unknown_mnemonic_is_skipped():
    result = parse_instructions("0: iconst_1\n1: frobnicate 3\n2: ireturn")

    assert [i.opcode for i in result] == [Opcode.ICONST_1, Opcode.IRETURN]
    assert result.diagnostics[0].reason == REASON_UNKNOWN_MNEMONIC


def test_empty_parameter_is_skipped():
    instruction, reason = parse_line("3: iload 1,, 2")

    assert instruction is None
    assert reason == REASON_EMPTY_PARAMETER


def test_tableswitch_targets_are_reported():
    """Switch target lines look like instructions but name no opcode."""
    text = "\n".join([
        "       1: tableswitch   { // 0 to 1",
        "                     0: 28",
        "                     1: 30",
        "               default: 32",
        "          }",
        "      28: iconst_0",
    ])
    result = parse_instructions(text)

    assert [i.opcode for i in result] == [Opcode.TABLESWITCH, Opcode.ICONST_0]
    assert result[0].parameters == ()
    assert [d.reason for d in result.diagnostics] == [
        REASON_UNKNOWN_MNEMONIC,
        REASON_UNKNOWN_MNEMONIC,
        REASON_UNPARSEABLE,
        REASON_UNPARSEABLE,
    ]


def test_mixed_parameter_kinds():
    result = parse_instructions(
        "4: newarray       int\n"
        "6: iinc          1, -1\n"
        "9: multianewarray #7,  2             // class \"[[I\""
    )

    assert result[0].parameters == (StringParam("int"),)
    assert result[1].parameters == (NumericParam(1), NumericParam(-1))
    assert result[2].parameters == (ConstantParam("#7"), NumericParam(2))
    assert result[2].comment == 'class "[[I"'


def test_blank_comment_is_dropped():
    result = parse_instructions("0: nop //   ")

    assert result[0].comment is None


def test_empty_input():
    result = parse_instructions("")

    assert isinstance(result, ParseResult)
    assert len(result) == 0
    assert result.diagnostics == ()


def test_trailing_newline_is_not_a_line():
    result = parse_instructions("0: iconst_0\n1: ireturn\n")

    assert len(result) == 2
    assert result.ok


def test_windows_line_endings():
    result = parse_instructions("0: iconst_0\r\n1: ireturn\r\n")

    assert [i.opcode for i in result] == [Opcode.ICONST_0, Opcode.IRETURN]
    assert result.ok


def test_only_newlines_separate_lines():
    result = parse_instructions("0: iconst_0\x0c1: nop")

    assert len(result) == 1
    assert result[0].offset == 0
    assert result[0].opcode is Opcode.ICONST_0


@pytest.mark.parametrize("text,expected", [
    ("", []),
    ("\n", [""]),
    ("a\nb", ["a", "b"]),
    ("a\r\nb\r\n", ["a", "b"]),
    ("a\x0bb c\x85d", ["a\x0bb c\x85d"]),
    ("a\n\nb", ["a", "", "b"]),
])
def test_split_lines(text, expected):
    assert split_lines(text) == expected


def test_parsing_is_idempotent():
    first = parse_instructions(HELLO_WORLD)
    second = parse_instructions(HELLO_WORLD)

    assert first == second
    assert list(first) == list(second)


@pytest.mark.parametrize("token,expected", [
    ("#10", ConstantParam("#10")),
    ("#", ConstantParam("#")),
    ("42", NumericParam(42)),
    ("-3", NumericParam(-3)),
    ("int", StringParam("int")),
    ("-", StringParam("-")),
    ("1a", StringParam("1a")),
])
def test_classify_parameter(token, expected):
    assert classify_parameter(token) == expected


def test_instruction_is_immutable():
    instr = Instruction(offset=0, opcode=Opcode.ILOAD, parameters=[NumericParam(1)])

    assert instr.parameters == (NumericParam(1),)
    with pytest.raises(AttributeError):
        instr.offset = 4


def test_instruction_renders_back_to_text():
    instr = parse_instructions("5: invokevirtual #2 // Method someMethod:()V")[0]

    assert str(instr) == "5: invokevirtual #2 // Method someMethod:()V"
    assert instr.to_dict() == {
        "offset": 5,
        "opcode": "invokevirtual",
        "opcode_value": 0xB6,
        "parameters": [{"kind": "constant", "value": "#2"}],
        "comment": "Method someMethod:()V",
    }
