"""Format adapters: JSON and YAML documents, plus capability detection.

The TOML target is hand-rendered (see :mod:`mcpunify.utils.toml`), so only
JSON and YAML go through a structured parser here.
"""

from __future__ import annotations

import importlib.util
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mcpunify.exceptions import CapabilityUnavailableError, ConfigParseError

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class Capabilities:
    """Which format capabilities are present for this run."""

    yaml: bool = True
    toml: bool = True

    @classmethod
    def detect(cls) -> Capabilities:
        return cls(
            yaml=importlib.util.find_spec("yaml") is not None,
            toml=importlib.util.find_spec("tomllib") is not None,
        )

    def require(self, capability: str, step: str = "") -> None:
        """Raise :class:`CapabilityUnavailableError` if *capability* is missing."""
        if not getattr(self, capability):
            raise CapabilityUnavailableError(capability.upper(), step)


def read_text(path: Path) -> str:
    """Read *path* as UTF-8, tolerating a leading byte-order mark."""
    return path.read_text(encoding="utf-8-sig")


# === JSON ===


def load_json_document(path: Path) -> dict[str, Any]:
    """Load a JSON object from *path*.

    A missing or blank file is an empty document.  Anything that is not a
    JSON object raises :class:`ConfigParseError`.
    """
    if not path.is_file():
        return {}

    try:
        text = read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigParseError(path, str(e)) from e

    if not text.strip():
        return {}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigParseError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigParseError(path, f"expected a JSON object, got {type(data).__name__}")
    return data


def dumps_json(data: Any) -> str:
    """Serialize *data* as indented JSON with a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


# === YAML ===


def load_yaml_document(path: Path, capabilities: Capabilities) -> dict[str, Any]:
    """Load a YAML mapping from *path* (missing or blank -> empty)."""
    if not path.is_file():
        return {}

    capabilities.require("yaml", f"reading {path.name}")
    import yaml

    try:
        raw = yaml.safe_load(read_text(path))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigParseError(path, str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigParseError(path, f"invalid YAML: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigParseError(path, f"expected a YAML mapping, got {type(raw).__name__}")
    return raw


def dumps_yaml(data: Any, capabilities: Capabilities) -> str:
    """Serialize *data* as block-style YAML, preserving key order."""
    capabilities.require("yaml", "YAML emission")
    import yaml

    try:
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
    except yaml.YAMLError as e:
        raise ValueError(f"cannot emit YAML: {e}") from e


def load_document(path: Path, capabilities: Capabilities) -> dict[str, Any]:
    """Load *path* as YAML or JSON depending on its suffix."""
    if path.suffix.lower() in YAML_SUFFIXES:
        return load_yaml_document(path, capabilities)
    return load_json_document(path)
