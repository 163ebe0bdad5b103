"""
Store of opcode descriptions scraped from the JVM Specification.

Chapter 6 of the JVMS documents each instruction in a section that starts
with ``<div class="section-execution" title="...">``. Most titles are a single
mnemonic; some describe a family of opcodes with a templated suffix, e.g.
``if<cond>`` covers ``ifeq``, ``ifne``, ``iflt`` and so on.
"""

import dataclasses
import html
import threading
from typing import Dict, Optional, Tuple, Union

import structlog

from ..core.opcodes import Opcode

logger = structlog.get_logger()

SECTION_MARKER = '<div class="section-execution"'
TITLE_START = '<div class="section-execution" title="'
TITLE_END = '"'
FAMILY_PLACEHOLDER = "<"


@dataclasses.dataclass(frozen=True)
class FamilyKey:
    """A templated description title split into its literal prefix."""

    prefix: str
    key: str

    def matches(self, mnemonic: str) -> bool:
        # ifge => if<cond>, lconst_1 => lconst_<n>
        return len(self.prefix) < len(mnemonic) and mnemonic[: len(self.prefix)] == self.prefix


@dataclasses.dataclass(frozen=True)
class _Snapshot:
    descriptions: Dict[str, str]
    families: Tuple[FamilyKey, ...]  # longest prefix first


def get_substring_between(text: str, start: str, end: str) -> Optional[str]:
    """Text between the first ``start`` and the following ``end``, or None."""
    start_pos = text.find(start)
    if start_pos == -1:
        return None
    start_pos += len(start)

    end_pos = text.find(end, start_pos)
    if end_pos == -1:
        return None
    return text[start_pos:end_pos]


def split_sections(document: str):
    """Yield each section of the document, from one marker up to the next."""
    start_pos = document.find(SECTION_MARKER)

    while start_pos != -1:
        end_pos = document.find(SECTION_MARKER, start_pos + len(SECTION_MARKER))
        if end_pos == -1:
            yield document[start_pos:]
            break
        yield document[start_pos:end_pos]
        start_pos = end_pos


def parse_family_key(key: str) -> Optional[FamilyKey]:
    """Parse a title such as ``lconst_<n>``. Plain mnemonics return None."""
    pos = key.find(FAMILY_PLACEHOLDER)
    if pos == -1:
        return None
    return FamilyKey(prefix=key[:pos], key=key)


def _order_families(families) -> Tuple[FamilyKey, ...]:
    # Stable sort keeps insertion order between equal prefix lengths
    return tuple(sorted(families, key=lambda family: -len(family.prefix)))


def _warn_overlapping(families: Tuple[FamilyKey, ...]):
    for i, family in enumerate(families):
        for other in families[i + 1:]:
            if family.prefix.startswith(other.prefix) or other.prefix.startswith(family.prefix):
                logger.warning(
                    "Overlapping opcode family descriptions",
                    family=family.key,
                    other=other.key,
                )


class DescriptionStore:
    """
    Opcode descriptions keyed by JVMS section title.

    A store is empty until load() is called with the JVMS document.
    Loads are serialized; lookups read an immutable snapshot and never block.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot = _Snapshot(descriptions={}, families=())

    def load(self, document: str) -> int:
        """
        Add every titled section of the document to the store.

        Loading is additive: a section replaces an existing entry with the same
        title and leaves other entries in place. Empty documents are ignored.

        Returns:
            Number of sections stored
        """
        if not document:
            logger.warning("Empty JVMS document, nothing to load")
            return 0

        with self._lock:
            descriptions = dict(self._snapshot.descriptions)
            count = 0

            for section in split_sections(document):
                title = get_substring_between(section, TITLE_START, TITLE_END)
                if title is None:
                    continue
                descriptions[html.unescape(title)] = section
                count += 1

            if count == 0:
                logger.warning("No opcode descriptions found in JVMS document")
                return 0

            families = []
            for key in descriptions:
                family = parse_family_key(key)
                if family is None:
                    continue
                if not family.prefix:
                    # "<x>" would match every mnemonic
                    logger.warning("Ignoring opcode family description without a literal prefix", family=key)
                    continue
                families.append(family)
            ordered = _order_families(families)
            _warn_overlapping(ordered)

            self._snapshot = _Snapshot(descriptions=descriptions, families=ordered)

        logger.info("Loaded opcode descriptions", sections=count, total=len(descriptions), families=len(ordered))
        return count

    def load_file(self, path) -> int:
        """Load a local copy of the document. Unreadable files leave the store unchanged."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = f.read()
        except OSError as e:
            logger.error("Could not read JVMS document", path=str(path), error=str(e))
            return 0

        return self.load(document)

    def lookup(self, opcode: Union[Opcode, str]) -> Optional[str]:
        """
        Get the description for an opcode.

        An exact title wins over a family title. Among family titles the one
        with the longest literal prefix wins.

        Args:
            opcode: An Opcode or its mnemonic

        Returns:
            The description HTML, or None if the opcode is not documented
        """
        mnemonic = opcode.mnemonic if isinstance(opcode, Opcode) else opcode
        snapshot = self._snapshot

        description = snapshot.descriptions.get(mnemonic)
        if description is not None:
            return description

        for family in snapshot.families:
            if family.matches(mnemonic):
                return snapshot.descriptions[family.key]

        return None

    def is_loaded(self) -> bool:
        return len(self._snapshot.descriptions) > 0

    def __len__(self) -> int:
        return len(self._snapshot.descriptions)

    def __contains__(self, key: str) -> bool:
        return key in self._snapshot.descriptions
