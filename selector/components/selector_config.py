"""Configuration for the selector."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from selector.components.pager import Layout
from selector.components.selection_engine import parse_accelerator
from selector.components.selection_models import ConfigurationError, KeyPress


_TRUTHY = {"1", "true", "yes", "on"}

# names registered in actions/open_selector/mode_resolver.py
MODE_NAMES = ("run", "window", "clipboard")


def is_known_mode(name: str) -> bool:
    return (name or "").lower().strip() in MODE_NAMES


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class SelectorConfig:
    """Layout and behaviour switches for selector sessions."""
    lines: int = 15
    columns: int = 1
    width: int = 50  # percent of the monitor when <= 100, pixels otherwise
    fixed_num_lines: bool = False
    horizontal: bool = False
    levenshtein_sort: bool = False
    auto_accept: bool = False
    modes: List[str] = field(default_factory=lambda: ["run", "window", "clipboard"])
    terminal: str = "foot"
    cancel_keys: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "SelectorConfig":
        """Create config from environment variables."""
        defaults = cls()
        return cls(
            lines=_env_int("LFN_SELECTOR_LINES", defaults.lines),
            columns=_env_int("LFN_SELECTOR_COLUMNS", defaults.columns),
            width=_env_int("LFN_SELECTOR_WIDTH", defaults.width),
            fixed_num_lines=_env_bool("LFN_SELECTOR_FIXED_LINES", defaults.fixed_num_lines),
            horizontal=_env_bool("LFN_SELECTOR_HMODE", defaults.horizontal),
            levenshtein_sort=_env_bool("LFN_SELECTOR_SORT", defaults.levenshtein_sort),
            auto_accept=_env_bool("LFN_SELECTOR_AUTO_ACCEPT", defaults.auto_accept),
            modes=_env_list("LFN_SELECTOR_MODES", defaults.modes),
            terminal=os.environ.get("LFN_SELECTOR_TERMINAL", defaults.terminal),
            cancel_keys=_env_list("LFN_SELECTOR_CANCEL_KEYS", defaults.cancel_keys),
        )

    def validate(self) -> "SelectorConfig":
        if self.lines <= 0:
            raise ConfigurationError("lines is invalid. You need at least one visible line.")
        if self.columns <= 0:
            raise ConfigurationError("columns is invalid. You need at least one visible column.")
        if self.width <= 0:
            raise ConfigurationError("width is invalid. You cannot have a window with no width.")
        if not self.modes:
            raise ConfigurationError("modes is empty. Enable at least one mode.")
        unknown = [name for name in self.modes if not is_known_mode(name)]
        if unknown:
            raise ConfigurationError(
                f"unknown mode(s) {', '.join(unknown)}. Available: {', '.join(MODE_NAMES)}."
            )
        self.accelerators()
        return self

    def enables(self, mode: str) -> bool:
        """True when `mode` is one of the configured modes."""
        key = (mode or "").lower().strip()
        return any(name.lower().strip() == key for name in self.modes)

    def layout(self) -> Layout:
        return Layout(
            lines=self.lines,
            columns=self.columns,
            fixed_num_lines=self.fixed_num_lines,
            horizontal=self.horizontal,
        )

    def accelerators(self) -> Tuple[KeyPress, ...]:
        return tuple(parse_accelerator(combo) for combo in self.cancel_keys)

    def window_width(self, monitor_width: int) -> int:
        if self.width <= 100:
            return int(monitor_width / 100.0 * self.width)
        return self.width


# Global config instance
_config: Optional[SelectorConfig] = None


def get_config() -> SelectorConfig:
    """Get the global config instance, validated on first load."""
    global _config

    if _config is None:
        _config = SelectorConfig.from_env().validate()

    return _config
