from .instruction_parser import (
    Diagnostic,
    ParseResult,
    classify_parameter,
    parse_instructions,
    parse_line,
    split_lines,
)
from .signature_matcher import (
    MethodSignature,
    find_best_match,
    normalize_signature,
    parse_signature,
)
from .bytecode_lookup import bytecode_for_member, instructions_for_member, match_member

__all__ = [
    "Diagnostic",
    "ParseResult",
    "classify_parameter",
    "parse_instructions",
    "parse_line",
    "split_lines",
    "MethodSignature",
    "find_best_match",
    "normalize_signature",
    "parse_signature",
    "bytecode_for_member",
    "instructions_for_member",
    "match_member",
]
