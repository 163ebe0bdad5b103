from .opcodes import Opcode, UnknownMnemonicError, opcode_for_mnemonic
from .instruction import (
    BytecodeParam,
    ConstantParam,
    Instruction,
    NumericParam,
    StringParam,
)

__all__ = [
    "Opcode",
    "UnknownMnemonicError",
    "opcode_for_mnemonic",
    "BytecodeParam",
    "ConstantParam",
    "Instruction",
    "NumericParam",
    "StringParam",
]
