"""
Module for reconciling a method signature with the signatures used as keys
of a class's disassembly cache.

Signatures coming from a compilation log and from a javap dump describe the
same method differently: generic type arguments are erased, types may or may
not be package qualified, whitespace and throws clauses differ. Matching is
done in four tiers:

1. a candidate identical to the target always wins;
2. a candidate equal to the target after normalization, package qualifiers kept;
3. a candidate equal to the target after normalization, package qualifiers
   dropped, as long as no parameter names a differently qualified type;
4. a candidate with the same name and parameter count whose parameter types
   are all compatible, scored by how closely types and modifiers agree.

If no candidate reaches tier 4 the target is considered unmatched.
"""

import dataclasses
import re
from typing import Iterable, List, Optional, Tuple

import structlog

logger = structlog.get_logger()

MODIFIERS = frozenset([
    "public", "protected", "private", "static", "final", "synchronized",
    "native", "abstract", "strictfp", "default", "transient", "volatile",
])

PRIMITIVES = frozenset([
    "boolean", "byte", "char", "short", "int", "long", "float", "double", "void",
])

# Scores
QUALIFIED_MATCH_SCORE = 2000
NORMALIZED_MATCH_SCORE = 1000
EXACT_TYPE_SCORE = 2
TYPE_VARIABLE_SCORE = 1
MODIFIER_SCORE = 1

_SPECIAL_NAMES = {"<init>": "\x00init\x00", "<clinit>": "\x00clinit\x00"}

_ANNOTATION_RE = re.compile(r"@[\w.$]+(?:\([^)]*\))?\s*")
_THROWS_RE = re.compile(r"\)\s*throws\b.*$", re.DOTALL)
_GENERIC_RE = re.compile(r"<[^<>]*>")
_QUALIFIED_RE = re.compile(r"\b(?:[A-Za-z_$][\w$]*\.)+([A-Za-z_$][\w$]*)")
_SIGNATURE_RE = re.compile(r"^(?P<head>.*?)(?P<name>[\w$<>.]+)\((?P<params>[^()]*)\)$")
_ARRAY_RE = re.compile(r"^(?P<base>.*?)(?P<dims>(?:\[\])*)$")
_TYPE_VARIABLE_RE = re.compile(r"^[A-Z][0-9]?$")


@dataclasses.dataclass(frozen=True)
class MethodSignature:
    """Structural view of a normalized method signature."""

    name: str
    param_types: Tuple[str, ...]
    return_type: Optional[str] = None  # None for constructors
    modifiers: frozenset = frozenset()


def _strip_generics(text: str) -> str:
    for name, placeholder in _SPECIAL_NAMES.items():
        text = text.replace(name, placeholder)

    # Innermost first so nested arguments like Map<K, List<V>> go away
    stripped = _GENERIC_RE.sub("", text)
    while stripped != text:
        text = stripped
        stripped = _GENERIC_RE.sub("", text)

    for name, placeholder in _SPECIAL_NAMES.items():
        text = text.replace(placeholder, name)
    return text


def normalize_signature(signature: str, keep_qualifiers: bool = False) -> str:
    """
    Reduce a signature to a canonical text form.

    Annotations, throws clauses, trailing semicolons and generic type
    arguments are removed, varargs become arrays and whitespace is collapsed.
    Package qualifiers are dropped unless keep_qualifiers is set.

    >>> normalize_signature("public java.util.List<java.lang.String> names(int) throws java.io.IOException;")
    'public List names(int)'
    >>> normalize_signature("public java.util.List<java.lang.String> names(int)", keep_qualifiers=True)
    'public java.util.List names(int)'
    """
    text = signature.strip()
    text = _ANNOTATION_RE.sub("", text)
    text = _THROWS_RE.sub(")", text)
    text = text.rstrip("; \t")
    text = _strip_generics(text)
    text = text.replace("...", "[]")
    if not keep_qualifiers:
        text = _QUALIFIED_RE.sub(r"\1", text)
    text = " ".join(text.split())
    text = re.sub(r"\s*([(),])\s*", r"\1", text)
    text = re.sub(r"\s*\[\s*\]", "[]", text)
    # Put back the space between a parameter separator and the next type
    text = text.replace(",", ", ")
    return text


def _param_type(param: str) -> str:
    tokens = [t for t in param.split() if t not in MODIFIERS]
    if not tokens:
        return param
    # "int count" and "String[] args" carry a parameter name
    return tokens[0]


def parse_signature(signature: str) -> Optional[MethodSignature]:
    """
    Split a signature into modifiers, return type, name and parameter types.

    Types keep their package qualifiers so that java.util.List and
    java.awt.List stay distinguishable.

    Returns None if the text does not look like a method declaration.
    """
    normalized = normalize_signature(signature, keep_qualifiers=True)
    match = _SIGNATURE_RE.match(normalized)
    if match is None:
        return None

    head_tokens = match.group("head").split()
    modifiers = frozenset(t for t in head_tokens if t in MODIFIERS)
    others = [t for t in head_tokens if t not in MODIFIERS]
    return_type = others[-1] if others else None

    params = match.group("params").strip()
    param_types = tuple(_param_type(p.strip()) for p in params.split(",") if p.strip()) if params else ()

    name = match.group("name").split(".")[-1]
    # A constructor's "name" is the declaring class, which javap may print qualified
    if return_type is None:
        name = name.split("$")[-1]

    return MethodSignature(
        name=name,
        param_types=param_types,
        return_type=return_type,
        modifiers=modifiers,
    )


def _split_array(type_name: str) -> Tuple[str, str]:
    match = _ARRAY_RE.match(type_name)
    return match.group("base"), match.group("dims")


def _simple_name(base: str) -> str:
    return re.split(r"[.$]", base)[-1]


def _qualifiers_conflict(base_a: str, base_b: str) -> bool:
    # Only two qualified names can disagree; Map.Entry still names java.util.Map$Entry
    if "." not in base_a or "." not in base_b:
        return False
    a = base_a.replace("$", ".")
    b = base_b.replace("$", ".")
    if a == b:
        return False
    return not (a.endswith("." + b) or b.endswith("." + a))


def _is_type_variable(base: str) -> bool:
    return bool(_TYPE_VARIABLE_RE.match(base))


def type_score(first: str, second: str) -> int:
    """
    Compatibility score of two parameter or return types.

    Returns:
        EXACT_TYPE_SCORE for the same simple type, TYPE_VARIABLE_SCORE when one
        side is a type variable and the other an erasure-compatible reference
        type, 0 when the types are incompatible. Two qualified types from
        different packages are always incompatible.
    """
    base_a, dims_a = _split_array(first)
    base_b, dims_b = _split_array(second)

    if dims_a != dims_b or _qualifiers_conflict(base_a, base_b):
        return 0

    simple_a = _simple_name(base_a)
    simple_b = _simple_name(base_b)

    if simple_a == simple_b:
        return EXACT_TYPE_SCORE

    if _is_type_variable(simple_a) and simple_b not in PRIMITIVES:
        return TYPE_VARIABLE_SCORE
    if _is_type_variable(simple_b) and simple_a not in PRIMITIVES:
        return TYPE_VARIABLE_SCORE

    return 0


def score_candidate(target: MethodSignature, candidate: MethodSignature) -> Optional[int]:
    """
    Score a structurally parsed candidate against the target.

    Returns:
        None when the candidate is not a plausible match, otherwise a score
        where higher is better
    """
    if target.name != candidate.name:
        return None
    if len(target.param_types) != len(candidate.param_types):
        return None

    score = 0
    for target_type, candidate_type in zip(target.param_types, candidate.param_types):
        param_score = type_score(target_type, candidate_type)
        if param_score == 0:
            return None
        score += param_score

    if target.return_type is not None and candidate.return_type is not None:
        score += type_score(target.return_type, candidate.return_type)

    score += MODIFIER_SCORE * len(target.modifiers & candidate.modifiers)
    return score


def find_best_match(target_signature: str, candidate_signatures: Iterable[str]) -> Optional[str]:
    """
    Find the candidate signature that best matches the target.

    Args:
        target_signature: Signature of the method being looked up
        candidate_signatures: Signatures available in the bytecode cache

    Returns:
        The best candidate, or None if no candidate is a plausible match.
        Ties are broken by choosing the lexicographically smallest candidate.
    """
    candidates = list(candidate_signatures)

    if target_signature in candidates:
        return target_signature

    target_qualified = normalize_signature(target_signature, keep_qualifiers=True)
    target_normalized = normalize_signature(target_signature)
    target_parsed = parse_signature(target_signature)

    scored: List[Tuple[int, str]] = []
    for candidate in candidates:
        if normalize_signature(candidate, keep_qualifiers=True) == target_qualified:
            scored.append((QUALIFIED_MATCH_SCORE, candidate))
            continue

        candidate_parsed = parse_signature(candidate)
        score = None
        if target_parsed is not None and candidate_parsed is not None:
            score = score_candidate(target_parsed, candidate_parsed)

        if normalize_signature(candidate) == target_normalized:
            # Same text once packages are dropped, but java.util.List is not java.awt.List
            if target_parsed is None or candidate_parsed is None or score is not None:
                scored.append((NORMALIZED_MATCH_SCORE, candidate))
            continue

        if score is not None:
            scored.append((score, candidate))

    if not scored:
        logger.debug("No signature match found", signature=target_signature, candidates=len(candidates))
        return None

    scored.sort(key=lambda item: (-item[0], item[1]))
    best_score, best = scored[0]
    logger.debug("Matched signature", signature=target_signature, match=best, score=best_score)
    return best
