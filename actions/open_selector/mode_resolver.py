from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from selector.components.mode_switcher import Mode
from selector.components.selector_config import SelectorConfig
from selector.modes.clipboard_module import ClipboardMode
from selector.modes.run_module import RunMode
from selector.modes.window_module import WindowMode


_MODE_MAP: Dict[str, Callable[[SelectorConfig], Mode]] = {
    "run": lambda config: RunMode(terminal=config.terminal),
    "window": lambda config: WindowMode(),
    "clipboard": lambda config: ClipboardMode(),
}


def build_mode(name: str, config: SelectorConfig) -> Mode:
    """Instantiate the mode registered under `name`.

    Raises `KeyError` when `name` is unknown.
    """
    key = name.lower().strip()
    if key not in _MODE_MAP:
        raise KeyError(f"mode not found: {name}")
    return _MODE_MAP[key](config)


def build_modes(names: Iterable[str], config: SelectorConfig) -> List[Mode]:
    return [build_mode(name, config) for name in names]


__all__ = ["build_mode", "build_modes"]
