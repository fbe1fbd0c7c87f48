"""Per-file checks run by the pre-commit hook."""

from .base import FileCheck
from .content import AsciiCheck, DebugMarkerCheck
from .source import FortranHeuristicsCheck, FragmentCheck
from .syntax import PerlCheck, XmlCheck, YamlCheck

__all__ = [
    "AsciiCheck",
    "DebugMarkerCheck",
    "FileCheck",
    "FortranHeuristicsCheck",
    "FragmentCheck",
    "PerlCheck",
    "XmlCheck",
    "YamlCheck",
]
