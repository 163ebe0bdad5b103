"""
Parsing and annotation of javap bytecode disassembly.
"""

# Model
from .core.opcodes import Opcode, UnknownMnemonicError, opcode_for_mnemonic
from .core.instruction import (
    BytecodeParam,
    ConstantParam,
    Instruction,
    NumericParam,
    StringParam,
)

# Analysis
from .analysis.instruction_parser import Diagnostic, ParseResult, parse_instructions
from .analysis.signature_matcher import find_best_match, normalize_signature
from .analysis.bytecode_lookup import bytecode_for_member, instructions_for_member

# Documentation
from .docs.description_store import DescriptionStore
from .docs.jvms_client import JVMSClient


__all__ = [
    # Model
    "Opcode",
    "UnknownMnemonicError",
    "opcode_for_mnemonic",
    "BytecodeParam",
    "ConstantParam",
    "Instruction",
    "NumericParam",
    "StringParam",
    # Analysis
    "Diagnostic",
    "ParseResult",
    "parse_instructions",
    "find_best_match",
    "normalize_signature",
    "bytecode_for_member",
    "instructions_for_member",
    # Documentation
    "DescriptionStore",
    "JVMSClient",
]
