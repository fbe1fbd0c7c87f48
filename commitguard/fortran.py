"""Tree-sitter powered heuristics for Fortran sources."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from tree_sitter import Parser
from tree_sitter_language_pack import get_language

from .models import Fragment

FORTRAN_SUFFIXES = (".F90", ".f90", ".F", ".f", ".Inc")

_POINTER_ATTRIBUTE = re.compile(r"\bpointer\b", re.IGNORECASE)
_NULL_INITIALIZER = re.compile(r"=>\s*null\s*\(\s*\)\s*$", re.IGNORECASE)
_TRAILING_COMMENT = re.compile(r"!.*$")


@dataclass(frozen=True)
class LintWarning:
    """A heuristic finding; reported but never fails the hook."""

    path: str
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}: {self.message}"


class FortranLinter:
    """Flags pointer components without ``=> null()`` and duplicated constructor assignments."""

    def __init__(self) -> None:
        self._parser: Optional[Parser] = None

    def lint(self, source: bytes, path: str, directives: Sequence[Fragment] = ()) -> List[LintWarning]:
        warnings = list(self.check_pointer_initialization(source, path))
        warnings.extend(self.check_constructor_assignments(directives))
        return warnings

    def check_pointer_initialization(self, source: bytes, path: str) -> Iterable[LintWarning]:
        tree = self._get_parser().parse(source)
        for node in _walk(tree.root_node):
            if node.type != "variable_declaration" or not _inside_derived_type(node):
                continue
            declaration = _logical_text(_node_text(node, source))
            if "::" not in declaration:
                continue
            attributes, entities = declaration.split("::", 1)
            if not _POINTER_ATTRIBUTE.search(attributes):
                continue
            for entity in _split_top_level(entities):
                if not _NULL_INITIALIZER.search(entity):
                    name = re.split(r"[\s(=]", entity.strip(), maxsplit=1)[0]
                    yield LintWarning(
                        path=path,
                        line=node.start_point[0] + 1,
                        message=f"pointer component '{name}' is not initialized to null()",
                    )

    def check_constructor_assignments(self, directives: Sequence[Fragment]) -> Iterable[LintWarning]:
        for fragment in directives:
            if fragment.root != "constructorAssign":
                continue
            try:
                element = ET.fromstring(fragment.text.lstrip(" \t"))
            except ET.ParseError:
                # Reported by directive validation.
                continue
            for name in duplicate_assignments(element.get("variables", "")):
                yield LintWarning(
                    path=fragment.path,
                    line=fragment.start_line,
                    message=f"variable '{name}' is assigned more than once by constructorAssign",
                )

    def _get_parser(self) -> Parser:
        if self._parser is None:
            self._parser = Parser(get_language("fortran"))
        return self._parser


def duplicate_assignments(variables: str) -> List[str]:
    """Names listed more than once in a constructorAssign ``variables`` attribute."""
    names = [item.strip().lstrip("*").strip().lower() for item in variables.split(",")]
    counts = Counter(name for name in names if name)
    return [name for name, count in counts.items() if count > 1]


def is_fortran(path: str) -> bool:
    return path.endswith(FORTRAN_SUFFIXES)


def _walk(node):  # type: ignore[no-untyped-def]
    yield node
    for child in node.children:
        yield from _walk(child)


def _inside_derived_type(node) -> bool:  # type: ignore[no-untyped-def]
    parent = node.parent
    while parent is not None:
        if parent.type == "derived_type_definition":
            return True
        parent = parent.parent
    return False


def _node_text(node, source: bytes) -> str:  # type: ignore[no-untyped-def]
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _logical_text(text: str) -> str:
    """Join continuation lines and drop trailing comments."""
    lines = [_TRAILING_COMMENT.sub("", line).strip() for line in text.splitlines()]
    joined = " ".join(line.rstrip("&").lstrip("&").strip() for line in lines)
    return joined.strip()


def _split_top_level(text: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for char in text:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part for part in parts if part.strip()]


__all__ = ["FortranLinter", "LintWarning", "duplicate_assignments", "is_fortran"]
