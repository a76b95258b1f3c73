from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from selector.components.matcher import TokenMatcher
from selector.components.mode_switcher import ModeAction
from selector.components.selection_models import CandidateSet, OutcomeKind, SessionResult


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    item_id: str
    preview: str

    @property
    def line(self) -> str:
        return f"{self.item_id}\t{self.preview}"


def parse_history(raw: str) -> List[HistoryEntry]:
    """Parse ``cliphist list`` output ("id \\t preview" per line)."""
    entries: List[HistoryEntry] = []
    for ln in (raw or "").splitlines():
        if not ln.strip():
            continue
        parts = ln.split("\t", 1)
        item_id = parts[0].strip()
        preview = parts[1] if len(parts) == 2 else ""
        entries.append(HistoryEntry(item_id, preview))
    return entries


class ClipboardMode:
    name = "clipboard"
    prompt = "clip:"

    def __init__(self, max_items: int = 200):
        self._max_items = max_items
        self._entries: List[HistoryEntry] = []

    def candidates(self) -> CandidateSet:
        try:
            out = subprocess.run(
                ["cliphist", "list"],
                capture_output=True,
                text=True,
                check=True,
            ).stdout
        except (subprocess.CalledProcessError, OSError):
            logger.debug("cliphist list failed", exc_info=True)
            out = ""
        self._entries = parse_history(out)[: self._max_items]
        return CandidateSet.from_lines(entry.preview for entry in self._entries)

    def active_index(self) -> Optional[int]:
        return None

    def matcher(self) -> TokenMatcher:
        return TokenMatcher()

    def matcher_context(self) -> object:
        return None

    def handle(self, result: SessionResult) -> ModeAction:
        kind = result.kind
        if kind is OutcomeKind.SELECTED:
            self.paste_item(self._entries[result.index])
        elif kind is OutcomeKind.DELETE_ENTRY:
            self.delete_item(self._entries[result.index])
            return ModeAction.RELOAD
        elif kind is OutcomeKind.CUSTOM_INPUT and result.outcome.text:
            self._copy(result.outcome.text.encode("utf-8"))
        return ModeAction.EXIT

    def paste_item(self, entry: HistoryEntry) -> None:
        try:
            result = subprocess.run(
                ["cliphist", "decode"],
                input=entry.line.encode("utf-8"),
                capture_output=True,
                check=True,
            )
        except (subprocess.CalledProcessError, OSError):
            logger.exception("paste_item failed for %s", entry.item_id)
            return
        self._copy(result.stdout)

    def delete_item(self, entry: HistoryEntry) -> None:
        try:
            subprocess.run(
                ["cliphist", "delete"],
                input=entry.line.encode("utf-8"),
                check=True,
            )
        except (subprocess.CalledProcessError, OSError):
            logger.exception("delete_item failed for %s", entry.item_id)

    @staticmethod
    def _copy(data: bytes) -> None:
        try:
            subprocess.run(["wl-copy"], input=data, check=True)
        except (subprocess.CalledProcessError, OSError):
            logger.exception("wl-copy failed")
