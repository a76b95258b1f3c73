from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from gi.repository import GLib

from fabric.utils import DesktopApp, get_desktop_applications
from fabric.utils.helpers import exec_shell_command_async

from selector.components.command_line import strip_field_codes, terminal_command
from selector.components.matcher import FieldMatcher
from selector.components.mode_switcher import ModeAction
from selector.components.selection_models import (
    Candidate,
    CandidateSet,
    OutcomeKind,
    SessionResult,
)


logger = logging.getLogger(__name__)


def app_fields(candidate: Candidate, apps: Sequence[DesktopApp]) -> Sequence[Optional[str]]:
    app = apps[candidate.index]
    return (app.display_name, app.name, app.generic_name, app.executable)


class RunMode:
    name = "run"
    prompt = "run:"

    def __init__(self, terminal: str = "foot", include_hidden: bool = False):
        self._terminal = terminal
        self._include_hidden = include_hidden
        self._apps: List[DesktopApp] = []

    def candidates(self) -> CandidateSet:
        try:
            apps = get_desktop_applications(include_hidden=self._include_hidden)
        except (GLib.Error, RuntimeError, ValueError):
            logger.exception("failed to enumerate desktop applications")
            apps = []
        self._apps = list(apps)
        return CandidateSet.from_lines(self._label(app, idx) for idx, app in enumerate(self._apps))

    @staticmethod
    def _label(app: DesktopApp, idx: int) -> str:
        return (
            app.display_name
            or app.generic_name
            or app.name
            or app.executable
            or app.command_line
            or f"app-{idx}"
        )

    def active_index(self) -> Optional[int]:
        return None

    def matcher(self) -> FieldMatcher:
        return FieldMatcher(app_fields)

    def matcher_context(self) -> Sequence[DesktopApp]:
        return tuple(self._apps)

    def handle(self, result: SessionResult) -> ModeAction:
        outcome = result.outcome
        if outcome.kind is OutcomeKind.SELECTED:
            app = self._apps[outcome.index]
            if outcome.shift and app.command_line:
                self.run_command(strip_field_codes(app.command_line), in_terminal=True)
            else:
                self.launch(app)
        elif outcome.kind is OutcomeKind.CUSTOM_INPUT:
            self.run_command(outcome.text or "", in_terminal=outcome.shift)
        return ModeAction.EXIT

    @staticmethod
    def launch(app: DesktopApp) -> None:
        try:
            app.launch()
        except (GLib.Error, RuntimeError, OSError):
            logger.exception("failed to launch application %s", app.name)

    def run_command(self, command: str, in_terminal: bool = False) -> None:
        command = command.strip()
        if not command:
            return
        if in_terminal:
            command = terminal_command(self._terminal, command)
        logger.debug("run mode: executing %r", command)
        try:
            exec_shell_command_async(command)
        except (GLib.Error, RuntimeError, OSError):
            logger.exception("failed to run %r", command)
