"""Configuration: packaged font tables and layout settings, merged with user overrides."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import yaml

from figuredbass.errors import ConfigError

PKG_ROOT = Path(__file__).resolve().parent
DEFAULT_CFG_PATH = PKG_ROOT / "fonts.default.yaml"
USER_CFG_PATH = Path.home() / ".config" / "figuredbass" / "config.yaml"

ALIGNMENTS: Final[set[str]] = {"top", "bottom"}


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read configuration '{path}': {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration '{path}' must be a mapping at top level.")
    return data


def _deep_merge(a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(a)
    for k, v in (b or {}).items():
        if k == "fonts" and isinstance(v, list) and isinstance(out.get(k), list):
            out[k] = _merge_fonts(out[k], v)
        elif isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def _merge_fonts(defaults: list[Any], user: list[Any]) -> list[Any]:
    """User font entries replace packaged ones of the same name and append the rest."""
    merged = copy.deepcopy(defaults)
    index = {_font_name(entry): i for i, entry in enumerate(merged)}
    for entry in user:
        name = _font_name(entry)
        if name in index:
            merged[index[name]] = copy.deepcopy(entry)
        else:
            index[name] = len(merged)
            merged.append(copy.deepcopy(entry))
    return merged


def _font_name(entry: Any) -> Any:
    if isinstance(entry, dict):
        return entry.get("display_name") or entry.get("family")
    return None


def load_config(
    user_path: Path | str | None = None,
    default_path: Path | str | None = None,
) -> dict[str, Any]:
    """
    Load the packaged configuration and merge user overrides on top.

    Args:
        user_path:    Override file; defaults to ``~/.config/figuredbass/config.yaml``.
                      A missing file is not an error.
        default_path: Packaged defaults; only tests need to change this.

    Raises:
        ConfigError: If a file exists but is not valid YAML.
    """
    dpath = Path(default_path) if default_path else DEFAULT_CFG_PATH
    upath = Path(user_path) if user_path else USER_CFG_PATH

    cfg = _deep_merge(_load_yaml(dpath), _load_yaml(upath))
    cfg.setdefault("fonts", [])
    cfg.setdefault("layout", {})
    return cfg


@dataclass(frozen=True)
class LayoutSettings:
    """
    Stack layout options.

    Attributes:
        style:          Digit style, 0 = modern, 1 = historic.
        alignment:      ``top`` stacks items downward from the first one,
                        ``bottom`` stacks them upward from the last one.
        line_height:    Factor applied to the font's default line height.
        units_per_tick: Horizontal spacing used when the caller supplies none.
    """

    style: int = 0
    alignment: str = "top"
    line_height: float = 1.0
    units_per_tick: float = 0.1

    def __post_init__(self) -> None:
        if self.style not in (0, 1):
            raise ConfigError(f"Digit style must be 0 or 1, got {self.style!r}.")
        if self.alignment not in ALIGNMENTS:
            supported = ", ".join(sorted(ALIGNMENTS))
            raise ConfigError(f"Unsupported alignment '{self.alignment}'. Use one of: {supported}.")

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> LayoutSettings:
        section = cfg.get("layout") or {}
        try:
            return cls(
                style=int(section.get("style", 0)),
                alignment=str(section.get("alignment", "top")).lower(),
                line_height=float(section.get("line_height", 1.0)),
                units_per_tick=float(section.get("units_per_tick", 0.1)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid layout settings: {exc}") from exc
