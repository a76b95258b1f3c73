from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from selector.components.matcher import FieldMatcher
from selector.components.mode_switcher import ModeAction
from selector.components.selection_models import (
    Candidate,
    CandidateSet,
    OutcomeKind,
    SessionResult,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowClient:
    address: str
    title: str
    window_class: str
    initial_title: str = ""
    initial_class: str = ""
    workspace: str = ""
    focused: bool = False


def parse_clients(raw: str) -> List[WindowClient]:
    """Parse ``hyprctl clients -j``; hidden and unmapped clients are skipped."""
    try:
        data = json.loads(raw or "[]")
    except json.JSONDecodeError:
        logger.debug("hyprctl returned invalid json", exc_info=True)
        return []
    if not isinstance(data, list):
        return []

    clients: List[WindowClient] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        if item.get("hidden") or item.get("mapped") is False:
            continue
        address = item.get("address")
        if not address:
            continue
        workspace = item.get("workspace") or {}
        clients.append(
            WindowClient(
                address=address,
                title=item.get("title") or "",
                window_class=item.get("class") or "",
                initial_title=item.get("initialTitle") or "",
                initial_class=item.get("initialClass") or "",
                workspace=str(workspace.get("name") or workspace.get("id") or ""),
                focused=item.get("focusHistoryID") == 0,
            )
        )
    return clients


def format_lines(clients: Sequence[WindowClient]) -> List[str]:
    """One row per client: workspace, padded class, title."""
    if not clients:
        return []
    desk_width = max(1, max(len(c.workspace) for c in clients))
    class_width = max(5, max(len(c.window_class) for c in clients))
    return [
        f"{c.workspace:<{desk_width}}  {c.window_class:<{class_width}}   {c.title}"
        for c in clients
    ]


def client_fields(candidate: Candidate, clients: Sequence[WindowClient]) -> Sequence[str]:
    client = clients[candidate.index]
    return (client.title, client.window_class, client.initial_title, client.initial_class)


class WindowMode:
    name = "window"
    prompt = "window:"

    def __init__(self):
        self._clients: List[WindowClient] = []

    def candidates(self) -> CandidateSet:
        try:
            out = subprocess.run(
                ["hyprctl", "clients", "-j"],
                capture_output=True,
                text=True,
                check=True,
            ).stdout
        except (subprocess.CalledProcessError, OSError):
            logger.exception("failed to list hyprland clients")
            out = "[]"
        self._clients = parse_clients(out)
        return CandidateSet.from_lines(format_lines(self._clients))

    def active_index(self) -> Optional[int]:
        for index, client in enumerate(self._clients):
            if client.focused:
                return index
        return None

    def matcher(self) -> FieldMatcher:
        return FieldMatcher(client_fields)

    def matcher_context(self) -> Sequence[WindowClient]:
        return tuple(self._clients)

    def handle(self, result: SessionResult) -> ModeAction:
        if result.kind is OutcomeKind.SELECTED:
            self.focus(self._clients[result.index])
        return ModeAction.EXIT

    @staticmethod
    def focus(client: WindowClient) -> None:
        try:
            subprocess.run(
                ["hyprctl", "dispatch", "focuswindow", f"address:{client.address}"],
                capture_output=True,
                check=True,
            )
        except (subprocess.CalledProcessError, OSError):
            logger.exception("failed to focus window %s", client.address)
