"""
Parser for javap-style disassembly blocks.

Each line of a block is expected to look like::

    5: invokevirtual #2                  // Method someMethod:()V

Lines that do not fit that shape (headers, blank separators, exception
tables) are skipped. Every skipped line is returned as a Diagnostic so the
caller always gets the instructions that did parse.
"""

import dataclasses
import re
from typing import Iterator, List, Optional, Tuple

import structlog

from ..core.instruction import (
    BytecodeParam,
    ConstantParam,
    Instruction,
    NumericParam,
    StringParam,
)
from ..core.opcodes import opcode_for_mnemonic

logger = structlog.get_logger()

# offset, mnemonic, parameter list, comment
INSTRUCTION_PATTERN = re.compile(r"^([0-9]+):\s([0-9a-z_]+)\s?([#0-9a-z,\- ]+)?\s?(//.*)?")

# Only \n and \r\n end a line; form feeds and other separators stay in the line
LINE_BREAK_PATTERN = re.compile(r"\r?\n")

CONSTANT_MARKER = "#"
COMMENT_MARKER = "//"

REASON_UNPARSEABLE = "unparseable"
REASON_UNKNOWN_MNEMONIC = "unknown-mnemonic"
REASON_EMPTY_PARAMETER = "empty-parameter"


@dataclasses.dataclass(frozen=True)
class Diagnostic:
    """A line that was skipped while parsing a block."""

    line_number: int  # 1-based
    line: str
    reason: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.reason}: {self.line!r}"


@dataclasses.dataclass(frozen=True)
class ParseResult:
    """
    Instructions parsed from a block plus the lines that were skipped.

    Iterating, indexing and len() operate on the instructions.
    """

    instructions: Tuple[Instruction, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index):
        return self.instructions[index]


def classify_parameter(token: str) -> BytecodeParam:
    """
    Classify a single trimmed operand token.

    The constant pool marker is checked before the integer parse so that
    ``#10`` is always a constant reference.
    """
    if token.startswith(CONSTANT_MARKER):
        return ConstantParam(token)

    try:
        return NumericParam(int(token))
    except ValueError:
        return StringParam(token)


def _parse_parameters(param_string: str) -> Optional[List[BytecodeParam]]:
    """Split a comma separated operand list. Returns None if a piece is empty."""
    params = []
    for part in param_string.split(","):
        part = part.strip()
        if not part:
            return None
        params.append(classify_parameter(part))
    return params


def parse_line(line: str) -> Tuple[Optional[Instruction], Optional[str]]:
    """
    Parse one disassembly line.

    Returns:
        Tuple (instruction, reason). Exactly one of the two is None.
    """
    match = INSTRUCTION_PATTERN.match(line.lstrip())
    if match is None:
        return None, REASON_UNPARSEABLE

    offset_text, mnemonic, param_string, comment = match.groups()

    opcode = opcode_for_mnemonic(mnemonic)
    if opcode is None:
        return None, REASON_UNKNOWN_MNEMONIC

    params: List[BytecodeParam] = []
    if param_string is not None and param_string.strip():
        parsed = _parse_parameters(param_string.strip())
        if parsed is None:
            return None, REASON_EMPTY_PARAMETER
        params = parsed

    comment_text = None
    if comment is not None:
        comment_text = comment[len(COMMENT_MARKER):].strip() or None

    return Instruction(
        offset=int(offset_text),
        opcode=opcode,
        parameters=tuple(params),
        comment=comment_text,
    ), None


def split_lines(bytecode: str) -> List[str]:
    """Split a block on line breaks. A trailing line break does not start a new line."""
    lines = LINE_BREAK_PATTERN.split(bytecode)
    if lines[-1] == "":
        lines.pop()
    return lines


def parse_instructions(bytecode: str) -> ParseResult:
    """
    Parse a disassembly block into instructions.

    Args:
        bytecode: Text of one method body as printed by ``javap -c``

    Returns:
        ParseResult with instructions in line order and a diagnostic for
        every skipped line
    """
    instructions: List[Instruction] = []
    diagnostics: List[Diagnostic] = []

    for line_number, line in enumerate(split_lines(bytecode), start=1):
        instruction, reason = parse_line(line)

        if instruction is not None:
            instructions.append(instruction)
        else:
            logger.warning("Could not parse bytecode line", line=line, line_number=line_number, reason=reason)
            diagnostics.append(Diagnostic(line_number=line_number, line=line, reason=reason))

    return ParseResult(instructions=tuple(instructions), diagnostics=tuple(diagnostics))
