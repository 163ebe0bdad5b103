"""
Lookup of a method's disassembly block in a per-class bytecode cache.
"""

from typing import Mapping, Optional, Tuple

import structlog

from .instruction_parser import ParseResult, parse_instructions
from .signature_matcher import find_best_match

logger = structlog.get_logger()


def match_member(signature: str, bytecode_cache: Mapping[str, str]) -> Optional[Tuple[str, str]]:
    """
    Find the cache entry for a method.

    Tries the signature as a cache key first and falls back to the best
    matching key. The cache is only read.

    Args:
        signature: Method signature as declared, e.g. ``public void run()``
        bytecode_cache: Mapping of javap signature to disassembly text

    Returns:
        Tuple (matched key, disassembly text), or None if no key matches
    """
    result = bytecode_cache.get(signature)
    if result is not None:
        return signature, result

    matched = find_best_match(signature, list(bytecode_cache.keys()))
    if matched is None:
        logger.debug("Bytecode not available for member", signature=signature)
        return None

    return matched, bytecode_cache[matched]


def bytecode_for_member(signature: str, bytecode_cache: Mapping[str, str]) -> Optional[str]:
    """Get the disassembly text for a method, or None if no key matches."""
    entry = match_member(signature, bytecode_cache)
    if entry is None:
        return None
    return entry[1]


def instructions_for_member(signature: str, bytecode_cache: Mapping[str, str]) -> ParseResult:
    """Look up a method's disassembly block and parse it. Empty result if not found."""
    bytecode = bytecode_for_member(signature, bytecode_cache)
    if bytecode is None:
        return ParseResult()
    return parse_instructions(bytecode)
