from fabric import Application

from selector.components.selector_config import get_config
from selector.selectorLayer import SelectorLayer


@Application.action("selector")
def open_selector_action(mode: str = "") -> str:
    """Open the selector, optionally in a given mode.

    Usage (CLI):
      fabric-cli invoke lfn-selector selector window
    """
    if mode and not get_config().enables(mode):
        return f"unknown mode: {mode}"
    SelectorLayer(mode or None)
    return f"opened {mode or 'selector'}"


__all__ = ["open_selector_action"]
