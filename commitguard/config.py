"""Configuration loading for commitguard (.commitguard.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".commitguard.yml"
BASE_PATH_ENV = "COMMITGUARD_BASE_PATH"
SKIP_ENV = "COMMITGUARD_SKIP_HOOKS"

DEFAULT_PROTECTED_BRANCHES = ("master", "main")
DEFAULT_DEBUG_MARKERS = ("!! DEBUG", "# DEBUG")
DEFAULT_ASCII_EXEMPT = ("*.bib", "*.md", "*.png", "*.pdf", "*.jpg", "*.hdf5")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LatexConfig:
    """Settings for compiling embedded LaTeX fragments."""

    document_class: str = "article"
    packages: List[str] = field(default_factory=lambda: ["amsmath", "amssymb"])
    preamble: Optional[str] = "commonPreamble"


@dataclass
class HookConfig:
    """Represents the settings defined in .commitguard.yml."""

    root: Path
    base_path: Path
    protected_branches: List[str] = field(default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES))
    vocabulary_file: Path = Path("aux/words.dict")
    class_manifest: Path = Path("work/build/classes.txt")
    schema_dir: Path = Path("schema")
    hunspell_dictionary: str = "en_US"
    debug_markers: List[str] = field(default_factory=lambda: list(DEFAULT_DEBUG_MARKERS))
    ascii_exempt: List[str] = field(default_factory=lambda: list(DEFAULT_ASCII_EXEMPT))
    latex: LatexConfig = field(default_factory=LatexConfig)

    @property
    def doc_dir(self) -> Path:
        """Directory holding shared document-class includes for fragment compilation."""
        return self.base_path / "doc"


def load_config(
    config_path: Path, *, environ: Optional[Mapping[str, str]] = None
) -> HookConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    base_path = _resolve_base_path(root, env)

    data = _read_config(config_file) if config_file.exists() else {}
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = HookConfig(root=root, base_path=base_path)

    branches = _as_str_list(data.get("protected_branches"))
    if branches:
        config.protected_branches = branches

    vocabulary = _as_str(data.get("vocabulary_file"))
    config.vocabulary_file = root / (vocabulary or config.vocabulary_file)
    manifest = _as_str(data.get("class_manifest"))
    config.class_manifest = root / (manifest or config.class_manifest)
    schema_dir = _as_str(data.get("schema_dir"))
    config.schema_dir = base_path / (schema_dir or config.schema_dir)

    dictionary = _as_str(data.get("hunspell_dictionary"))
    if dictionary:
        config.hunspell_dictionary = dictionary

    if "debug_markers" in data:
        config.debug_markers = _as_str_list(data.get("debug_markers"))
    if "ascii_exempt" in data:
        config.ascii_exempt = _as_str_list(data.get("ascii_exempt"))

    latex_data = _as_dict(data.get("latex"))
    if latex_data:
        document_class = _as_str(latex_data.get("document_class"))
        if document_class:
            config.latex.document_class = document_class
        if "packages" in latex_data:
            config.latex.packages = _as_str_list(latex_data.get("packages"))
        if "preamble" in latex_data:
            config.latex.preamble = _as_str(latex_data.get("preamble"))

    return config


def skip_requested(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when the user asked to bypass every hook for this command."""
    env = os.environ if environ is None else environ
    return env.get(SKIP_ENV, "").strip().lower() in {"1", "true", "yes"}


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_base_path(root: Path, env: Mapping[str, str]) -> Path:
    value = env.get(BASE_PATH_ENV)
    if value:
        return Path(value).expanduser().resolve()
    return root


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
