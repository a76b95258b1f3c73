"""Shell command helpers for the run mode."""
from __future__ import annotations

import re
import shlex

# desktop entry Exec field codes, e.g. "firefox %u"
_FIELD_CODE = re.compile(r"\s*(?<!%)%[fFuUdDnNickvm](?=\s|$)")


def strip_field_codes(command_line: str) -> str:
    """Drop ``%f``/``%U``-style placeholders from a desktop entry Exec line."""
    stripped = _FIELD_CODE.sub("", command_line or "")
    return stripped.replace("%%", "%").strip()


def terminal_command(terminal: str, command: str) -> str:
    """Wrap ``command`` so it runs inside ``terminal``.

    ``terminal`` may carry its own arguments, e.g. ``"foot --title run"``.
    """
    argv = shlex.split(terminal or "")
    if not argv:
        return command
    return f"{shlex.join(argv)} -e {command}"
