"""Line-oriented state machine extracting embedded directives and LaTeX blocks.

Source files carry two kinds of embedded markup::

    !![
    <inputParameter>
      <name>mass</name>
      <description>The mass of the halo, $M$.</description>
    </inputParameter>
    !!]

    !!{
    Prose documenting the module, written in \\LaTeX.
    !!}

plus legacy single-line-prefixed directives (``!# <include .../>``). Every line
is classified into a :class:`LineKind` and the next :class:`State` is looked up
in :data:`TRANSITIONS`. Pairs missing from the table are structural problems
(stray or unbalanced markers) reported alongside the fragments.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..logging import get_logger
from ..models import Fragment, FragmentKind

_LOGGER = get_logger("fragments")


class State(str, Enum):
    CODE = "code"
    XML_BLOCK = "xml-block"
    DIRECTIVE = "directive"
    LATEX_BLOCK = "latex-block"
    COMMENT = "comment"


class LineKind(str, Enum):
    XML_OPEN = "xml-open"
    XML_CLOSE = "xml-close"
    LATEX_OPEN = "latex-open"
    LATEX_CLOSE = "latex-close"
    COMMENT_DIRECTIVE = "comment-directive"
    PREFIXED = "prefixed"
    COMMENT = "comment"
    XML_MISC = "xml-misc"
    TAG = "tag"
    BLANK = "blank"
    TEXT = "text"


_LINE_PATTERNS: Tuple[Tuple[LineKind, "re.Pattern[str]"], ...] = (
    (LineKind.XML_OPEN, re.compile(r"^\s*!!\s?\[\s*$")),
    (LineKind.XML_CLOSE, re.compile(r"^\s*!!\s?\]\s*$")),
    (LineKind.LATEX_OPEN, re.compile(r"^\s*!!\s?\{\s*$")),
    (LineKind.LATEX_CLOSE, re.compile(r"^\s*!!\s?\}\s*$")),
    (LineKind.COMMENT_DIRECTIVE, re.compile(r"^\s*!#\s*<[A-Za-z_]")),
    (LineKind.PREFIXED, re.compile(r"^\s*!#")),
    (LineKind.COMMENT, re.compile(r"^\s*!")),
    (LineKind.XML_MISC, re.compile(r"^\s*<[!?]")),
    (LineKind.TAG, re.compile(r"^\s*<[A-Za-z_]")),
    (LineKind.BLANK, re.compile(r"^\s*$")),
)

_PREFIX = re.compile(r"^\s*!#\s?")
_ROOT = re.compile(r"<([A-Za-z_][\w.:-]*)")

_OUTSIDE: Dict[LineKind, State] = {
    LineKind.XML_OPEN: State.XML_BLOCK,
    LineKind.LATEX_OPEN: State.LATEX_BLOCK,
    LineKind.COMMENT_DIRECTIVE: State.DIRECTIVE,
    LineKind.PREFIXED: State.COMMENT,
    LineKind.COMMENT: State.COMMENT,
    LineKind.XML_MISC: State.CODE,
    LineKind.TAG: State.CODE,
    LineKind.BLANK: State.CODE,
    LineKind.TEXT: State.CODE,
}

TRANSITIONS: Dict[Tuple[State, LineKind], State] = {
    **{(State.CODE, kind): target for kind, target in _OUTSIDE.items()},
    **{(State.COMMENT, kind): target for kind, target in _OUTSIDE.items()},
    (State.XML_BLOCK, LineKind.TAG): State.DIRECTIVE,
    (State.XML_BLOCK, LineKind.BLANK): State.XML_BLOCK,
    (State.XML_BLOCK, LineKind.COMMENT): State.XML_BLOCK,
    (State.XML_BLOCK, LineKind.XML_MISC): State.XML_BLOCK,
    (State.XML_BLOCK, LineKind.PREFIXED): State.XML_BLOCK,
    (State.XML_BLOCK, LineKind.XML_CLOSE): State.CODE,
    (State.LATEX_BLOCK, LineKind.LATEX_CLOSE): State.CODE,
    **{
        (State.LATEX_BLOCK, kind): State.LATEX_BLOCK
        for kind in LineKind
        if kind not in (LineKind.LATEX_CLOSE, LineKind.XML_OPEN, LineKind.XML_CLOSE, LineKind.LATEX_OPEN)
    },
    (State.DIRECTIVE, LineKind.XML_CLOSE): State.CODE,
    **{
        (State.DIRECTIVE, kind): State.DIRECTIVE
        for kind in LineKind
        if kind not in (LineKind.XML_CLOSE, LineKind.XML_OPEN, LineKind.LATEX_OPEN, LineKind.LATEX_CLOSE)
    },
}

# Lines that continue a legacy ``!#`` directive; anything else ends it.
_LEGACY_CONTINUATION = (LineKind.COMMENT_DIRECTIVE, LineKind.PREFIXED)


def classify(line: str) -> LineKind:
    for kind, pattern in _LINE_PATTERNS:
        if pattern.match(line):
            return kind
    return LineKind.TEXT


@dataclass(frozen=True)
class Problem:
    """A structural error found while scanning, such as an unbalanced marker."""

    line: int
    message: str


@dataclass
class ExtractionResult:
    path: str
    fragments: List[Fragment] = field(default_factory=list)
    problems: List[Problem] = field(default_factory=list)

    @property
    def directives(self) -> List[Fragment]:
        return [fragment for fragment in self.fragments if fragment.kind is FragmentKind.DIRECTIVE]

    @property
    def latex_blocks(self) -> List[Fragment]:
        return [fragment for fragment in self.fragments if fragment.kind is FragmentKind.LATEX]


@dataclass
class _Run:
    kind: FragmentKind
    start_line: int
    start_byte: int
    raw: List[str] = field(default_factory=list)
    text: List[str] = field(default_factory=list)
    root: Optional[str] = None
    legacy: bool = False


class _Scan:
    """Mutable state of a single pass over one file."""

    def __init__(self, path: str) -> None:
        self.result = ExtractionResult(path=path)
        self.state = State.CODE
        self.run: Optional[_Run] = None
        self.block_start = 0
        self.line_number = 0
        self.offset = 0

    def feed(self, line: str) -> None:
        self.line_number += 1
        kind = classify(line)
        if self.state is State.DIRECTIVE and self.run is not None and self.run.legacy:
            if kind not in _LEGACY_CONTINUATION:
                self._emit()
                self.state = State.CODE
        target = TRANSITIONS.get((self.state, kind))
        if target is None:
            self._problem(f"unexpected {kind.value} line in {self.state.value}")
        else:
            self._apply(kind, target, line)
        self.offset += len(line.encode("utf-8"))

    def finish(self) -> ExtractionResult:
        if self.state is State.DIRECTIVE:
            self._emit()
        elif self.state is State.LATEX_BLOCK:
            self._problem(f"LaTeX block opened at line {self.block_start} is never closed")
            self._emit()
        elif self.state is State.XML_BLOCK:
            self._problem(f"XML block opened at line {self.block_start} is never closed")
        else:
            self._emit()
        return self.result

    def _apply(self, kind: LineKind, target: State, line: str) -> None:
        source = self.state
        if target is not source:
            _LOGGER.debug("%s:%d %s -> %s", self.result.path, self.line_number, source.value, target.value)

        if source is State.DIRECTIVE:
            if target is State.DIRECTIVE:
                self._append(line)
                self._complete_directive()
            else:
                # Enclosing block closed before the directive ended; the XML
                # parse of the truncated text reports it.
                self._emit()
                self.state = target
            return

        if source is State.LATEX_BLOCK:
            if target is State.LATEX_BLOCK:
                self._append(line)
            else:
                self._append_raw(line)
                self._emit()
            self.state = target
            return

        if target is State.DIRECTIVE:
            if source is not State.XML_BLOCK:
                self._emit()
            run = self._open(FragmentKind.DIRECTIVE, legacy=source is not State.XML_BLOCK)
            run.root = _root_name(_strip_prefix(line))
            self._append(line)
            self.state = State.DIRECTIVE
            self._complete_directive()
            return

        if target is State.LATEX_BLOCK:
            self._emit()
            self.block_start = self.line_number
            self._open(FragmentKind.LATEX)
            self._append_raw(line)
        elif target is State.XML_BLOCK and source is not State.XML_BLOCK:
            self._emit()
            self.block_start = self.line_number
        elif target in (State.CODE, State.COMMENT) and source is not State.XML_BLOCK:
            run_kind = FragmentKind.PROSE if target is State.COMMENT else FragmentKind.CODE
            if self.run is None or self.run.kind is not run_kind:
                self._emit()
                self._open(run_kind)
            self._append(line)
        self.state = target

    def _complete_directive(self) -> None:
        run = self.run
        if run is None or run.root is None:
            return
        text = "".join(run.text)
        current = run.text[-1] if run.text else ""
        if re.search(rf"</{re.escape(run.root)}\s*>", current) or re.match(
            rf"\s*<{re.escape(run.root)}\b[^<>]*/>\s*$", text, re.DOTALL
        ):
            self._emit()
            self.state = State.CODE if run.legacy else State.XML_BLOCK

    def _open(self, kind: FragmentKind, *, legacy: bool = False) -> _Run:
        self.run = _Run(kind=kind, start_line=self.line_number, start_byte=self.offset, legacy=legacy)
        return self.run

    def _current(self) -> _Run:
        if self.run is None:
            raise RuntimeError(f"{self.result.path}:{self.line_number}: no fragment is open")
        return self.run

    def _append(self, line: str) -> None:
        run = self._current()
        run.raw.append(line)
        run.text.append(_strip_prefix(line) if run.legacy or run.kind is FragmentKind.PROSE else line)

    def _append_raw(self, line: str) -> None:
        self._current().raw.append(line)

    def _emit(self) -> None:
        run = self.run
        self.run = None
        if run is None or not run.raw:
            return
        end_byte = run.start_byte + sum(len(line.encode("utf-8")) for line in run.raw)
        text_lines = run.text
        self.result.fragments.append(
            Fragment(
                kind=run.kind,
                path=self.result.path,
                start_line=run.start_line,
                end_line=run.start_line + len(run.raw) - 1,
                start_byte=run.start_byte,
                end_byte=end_byte,
                raw="".join(run.raw),
                text="".join(text_lines),
                root=run.root,
            )
        )

    def _problem(self, message: str) -> None:
        self.result.problems.append(Problem(line=self.line_number, message=message))


class FragmentExtractor:
    """Splits a source file into code, prose, directive and LaTeX fragments."""

    def extract(self, text: str, path: str = "<string>") -> ExtractionResult:
        scan = _Scan(path)
        for line in text.splitlines(keepends=True):
            scan.feed(line)
        return scan.finish()

    def extract_file(self, source: Path, display_path: Optional[str] = None) -> ExtractionResult:
        text = source.read_text(encoding="utf-8", errors="replace")
        return self.extract(text, display_path or str(source))


def _strip_prefix(line: str) -> str:
    if line.lstrip().startswith("!#"):
        return _PREFIX.sub("", line, count=1)
    if line.lstrip().startswith("!"):
        return re.sub(r"^\s*!+\s?", "", line, count=1)
    return line


def _root_name(line: str) -> Optional[str]:
    match = _ROOT.search(line)
    return match.group(1) if match else None


__all__ = [
    "ExtractionResult",
    "FragmentExtractor",
    "LineKind",
    "Problem",
    "State",
    "TRANSITIONS",
    "classify",
]
