import dataclasses
from typing import Any, Dict, Optional, Tuple, Union

from .opcodes import Opcode


@dataclasses.dataclass(frozen=True)
class ConstantParam:
    """Constant pool reference such as ``#12``, kept verbatim."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclasses.dataclass(frozen=True)
class NumericParam:
    """Integer operand, e.g. a local variable index or an iinc delta."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclasses.dataclass(frozen=True)
class StringParam:
    """Any other operand: array type names, labels, branch targets."""

    text: str

    def __str__(self) -> str:
        return self.text


BytecodeParam = Union[ConstantParam, NumericParam, StringParam]


@dataclasses.dataclass(frozen=True)
class Instruction:
    """
    One decoded line of a javap disassembly block.

    Offsets are unique within the block the instruction was parsed from,
    not across methods.
    """

    offset: int
    opcode: Opcode
    parameters: Tuple[BytecodeParam, ...] = ()
    comment: Optional[str] = None

    def __post_init__(self):
        # Accept lists from callers but store an immutable tuple
        object.__setattr__(self, "parameters", tuple(self.parameters))

    @property
    def mnemonic(self) -> str:
        return self.opcode.mnemonic

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation for JSON/YAML output."""
        params = []
        for param in self.parameters:
            if isinstance(param, ConstantParam):
                params.append({"kind": "constant", "value": param.text})
            elif isinstance(param, NumericParam):
                params.append({"kind": "numeric", "value": param.value})
            else:
                params.append({"kind": "string", "value": param.text})

        return {
            "offset": self.offset,
            "opcode": self.opcode.mnemonic,
            "opcode_value": int(self.opcode),
            "parameters": params,
            "comment": self.comment,
        }

    def __str__(self) -> str:
        text = f"{self.offset}: {self.opcode.mnemonic}"
        if self.parameters:
            text += " " + ", ".join(str(p) for p in self.parameters)
        if self.comment:
            text += " // " + self.comment
        return text
