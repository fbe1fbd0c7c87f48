"""Allow-list of domain words for the spell-checker."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, List, Optional

from .logging import get_logger

_CAMEL_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")
_LOGGER = get_logger("vocabulary")


def split_camel_case(word: str) -> List[str]:
    """Split ``darkMatterHaloNFW`` into ``["dark", "Matter", "Halo", "NFW"]``."""
    return _CAMEL_PATTERN.findall(word)


@dataclass(frozen=True)
class Vocabulary:
    """Immutable set of words the spell-checker must accept."""

    words: FrozenSet[str] = frozenset()

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and (word in self.words or word.lower() in self.words)

    def __len__(self) -> int:
        return len(self.words)

    def as_dictionary(self) -> str:
        """Render as a hunspell personal dictionary (one word per line)."""
        return "".join(f"{word}\n" for word in sorted(self.words))

    @classmethod
    def load(cls, vocabulary_file: Optional[Path], class_manifest: Optional[Path] = None) -> "Vocabulary":
        """Build from a word list plus class names and their camel-case parts."""
        words = set(_read_entries(vocabulary_file))
        for class_name in _read_entries(class_manifest):
            words.add(class_name)
            words.update(part for part in split_camel_case(class_name) if len(part) > 1)
        _LOGGER.debug("Loaded vocabulary with %d words", len(words))
        return cls(words=frozenset(words))


def _read_entries(path: Optional[Path]) -> List[str]:
    if path is None or not path.exists():
        return []
    entries: List[str] = []
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        # Manifests may carry a description after the class name.
        entries.append(entry.split()[0])
    return entries


__all__ = ["Vocabulary", "split_camel_case"]
