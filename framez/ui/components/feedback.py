"""User-facing feedback: blocking alerts and loading labels."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from ...errors import BackendRequestError, ValidationError, describe_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Alert:
    title: str
    message: str


Notifier = Callable[[Alert], None]


def alert_for_error(exc: BaseException, *, title: str = "Error") -> Alert:
    """Build the alert shown for ``exc``; validation errors carry their own title."""

    if isinstance(exc, ValidationError):
        return Alert(exc.title, exc.message)
    if isinstance(exc, BackendRequestError):
        return Alert(title, exc.message)
    return Alert(title, describe_error(exc))


class AlertLog:
    """Notifier that records alerts in order; renderers drain it after each intent."""

    def __init__(self) -> None:
        self.alerts: list[Alert] = []

    def __call__(self, alert: Alert) -> None:
        logger.info("Alert shown: %s - %s", alert.title, alert.message)
        self.alerts.append(alert)

    @property
    def last(self) -> Alert | None:
        return self.alerts[-1] if self.alerts else None

    def drain(self) -> list[Alert]:
        alerts, self.alerts = self.alerts, []
        return alerts


__all__ = ["Alert", "Notifier", "AlertLog", "alert_for_error"]
