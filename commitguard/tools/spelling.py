"""Spell-check prose and LaTeX fragments with hunspell."""

from __future__ import annotations

import re
import tempfile
from collections import Counter
from pathlib import Path
from typing import List

from ..logging import get_logger
from ..vocabulary import Vocabulary, split_camel_case
from .base import ProcessRunner, SubprocessTool, ToolError, ToolReport, combined_output

_LOGGER = get_logger("tools.spelling")

_COMMENT = re.compile(r"(?<!\\)%.*$", re.MULTILINE)
_MATH_ENVIRONMENTS = re.compile(
    r"\\begin\{(equation|align|eqnarray|displaymath|verbatim)(\*?)\}.*?\\end\{\1\2\}", re.DOTALL
)
_DISPLAY_MATH = re.compile(r"\$\$.*?\$\$|\\\[.*?\\\]|\\\(.*?\\\)", re.DOTALL)
_INLINE_MATH = re.compile(r"(?<!\\)\$.*?(?<!\\)\$", re.DOTALL)
_GLOSSARY = re.compile(r"\\(?:gls|glspl|Gls|Glspl|glsentry\w*|acrshort|acrlong|acrfull)\*?(?:\[[^\]]*\])?\{[^}]*\}")
_REFERENCES = re.compile(
    r"\\(?:cite[a-z]*|ref\w*|eqref|label|url|href|input|include|texttt)\*?(?:\[[^\]]*\])?\{[^}]*\}"
)
_SCRIPTS = re.compile(r"[_^](?:\{[^}]*\}|\\?[A-Za-z0-9])")
_COMMANDS = re.compile(r"\\[A-Za-z]+\*?|\\.")
_TOKEN = re.compile(r"[A-Za-z][A-Za-z0-9']*")


def strip_latex(text: str) -> str:
    """Remove markup that hunspell should never see."""
    text = _COMMENT.sub(" ", text)
    text = _MATH_ENVIRONMENTS.sub(" ", text)
    text = _DISPLAY_MATH.sub(" ", text)
    text = _INLINE_MATH.sub(" ", text)
    text = _GLOSSARY.sub(" ", text)
    text = _REFERENCES.sub(" ", text)
    text = _SCRIPTS.sub(" ", text)
    text = _COMMANDS.sub(" ", text)
    return re.sub(r"[{}\[\]~]", " ", text)


def candidate_words(text: str, vocabulary: Vocabulary) -> List[str]:
    """Words from cleaned text, with camel-case identifiers split into parts."""
    words: List[str] = []
    for match in _TOKEN.finditer(strip_latex(text)):
        token = match.group(0).strip("'")
        if not token or token in vocabulary:
            continue
        if any(char.isdigit() for char in token):
            continue
        parts = split_camel_case(token) if any(char.isupper() for char in token[1:]) else [token]
        for part in parts:
            if len(part) > 1 and part.isalpha() and part not in vocabulary:
                words.append(part)
    return words


class SpellChecker(SubprocessTool):
    """Reports unique misspelled words, with counts, using hunspell."""

    name = "hunspell"
    executable = "hunspell"

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        *,
        executable: str | None = None,
        dictionary: str = "en_US",
    ) -> None:
        super().__init__(runner, executable=executable)
        self.dictionary = dictionary

    def misspellings(self, text: str, vocabulary: Vocabulary) -> Counter:
        words = candidate_words(text, vocabulary)
        if not words:
            return Counter()
        personal = tempfile.NamedTemporaryFile(
            "w", prefix="commitguard-dict-", suffix=".dic", encoding="utf-8", delete=False
        )
        personal_path = Path(personal.name)
        try:
            with personal:
                personal.write(vocabulary.as_dictionary())
            completed = self._invoke(
                ["-l", "-d", self.dictionary, "-p", str(personal_path)],
                input="\n".join(words) + "\n",
            )
        finally:
            personal_path.unlink(missing_ok=True)
        if completed.returncode != 0:
            raise ToolError(self.name, combined_output(completed) or f"exit code {completed.returncode}")
        flagged = {line.strip() for line in completed.stdout.splitlines() if line.strip()}
        counts = Counter(word for word in words if word in flagged)
        _LOGGER.debug("hunspell flagged %d unique words", len(counts))
        return counts

    def run(self, text: str, *, vocabulary: Vocabulary = Vocabulary()) -> ToolReport:
        counts = self.misspellings(text, vocabulary)
        if not counts:
            return ToolReport(tool=self.name, ok=True)
        return ToolReport(tool=self.name, ok=False, output=format_counts(counts))


def format_counts(counts: Counter) -> str:
    return "\n".join(f"{word} ({count})" for word, count in sorted(counts.items()))


__all__ = ["SpellChecker", "candidate_words", "format_counts", "strip_latex"]
