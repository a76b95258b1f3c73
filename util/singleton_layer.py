from __future__ import annotations

from typing import Any, ClassVar

from gi.repository import GLib


class SingletonLayerMixin:
    """Keeps one overlay layer alive; later constructions reopen it instead.

    A second ``Layer(mode)`` call returns the live instance and schedules
    ``instance.reopen(mode)`` on the main loop.
    """

    _instance: ClassVar[SingletonLayerMixin | None] = None

    def __new__(cls, *args: Any, **kwargs: Any):
        existing = cls._instance
        if existing is not None:

            def _reopen() -> bool:
                cls._reopen_existing(existing, *args, **kwargs)
                return False

            GLib.idle_add(_reopen)
            return existing

        instance = super().__new__(cls)
        cls._instance = instance
        return instance

    def _prepare_singleton(self) -> bool:
        if getattr(self, "_singleton_initialized", False):
            return False
        self._singleton_initialized = True
        return True

    def _register_singleton_cleanup(self) -> None:
        self.connect("destroy", self._on_singleton_destroy)

    @classmethod
    def _reopen_existing(cls, instance: Any, *args: Any, **kwargs: Any) -> None:
        reopen = getattr(instance, "reopen", None)
        if not callable(reopen):
            return
        try:
            reopen(*args, **kwargs)
        except (AttributeError, RuntimeError):
            return

    def _on_singleton_destroy(self, *_: Any) -> None:
        type(self)._instance = None
        self._singleton_initialized = False
