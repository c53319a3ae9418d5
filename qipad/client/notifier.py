"""Notifier - toast records surfaced by mutations and flows.

Invariants:
    - Error toasts use variant "destructive"; everything else "default"
    - Toasts are appended in the order they were raised
"""

import logging
from dataclasses import dataclass
from typing import Callable, Literal

logger = logging.getLogger(__name__)

ToastVariant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Toast:
    title: str
    description: str | None = None
    variant: ToastVariant = "default"


class Notifier:
    """Collects toasts and forwards them to listeners (a UI, a CLI printer)."""

    def __init__(self):
        self.toasts: list[Toast] = []
        self._listeners: list[Callable[[Toast], None]] = []

    def listen(self, listener: Callable[[Toast], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def toast(
        self, title: str, description: str | None = None,
        variant: ToastVariant = "default",
    ) -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        self.toasts.append(toast)
        log = logger.warning if variant == "destructive" else logger.info
        log(f"{title}: {description}" if description else title)
        for listener in list(self._listeners):
            listener(toast)
        return toast

    def success(self, title: str, description: str | None = None) -> Toast:
        return self.toast(title, description)

    def error(self, title: str, description: str | None = None) -> Toast:
        return self.toast(title, description, variant="destructive")

    @property
    def last(self) -> Toast | None:
        return self.toasts[-1] if self.toasts else None
