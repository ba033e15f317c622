"""
Process-wide system settings (wrap rate, minimum profit rate).

The current value is a frozen SystemSettings snapshot. Writers build a new
snapshot and swap the reference under a lock; readers just read the reference,
so a calculation running during an update sees either the old or the new
snapshot, never a mix.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from govrate.config import (
    DEFAULT_MIN_PROFIT_RATE_PCT,
    DEFAULT_WRAP_RATE_PCT,
    MIN_PROFIT_RATE_BOUNDS,
    WRAP_RATE_BOUNDS,
)
from govrate.models.pricing_schema import SystemSettings

logger = logging.getLogger("govrate.settings")

SettingsListener = Callable[[SystemSettings], None]


def _check_bounds(name: str, value: float, bounds) -> float:
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low:g} and {high:g}; received {value}")
    return float(value)


class SystemSettingsStore:
    """Versioned, swappable holder for the current SystemSettings."""

    def __init__(self, initial: Optional[SystemSettings] = None) -> None:
        self._current: SystemSettings = initial or SystemSettings(
            wrap_rate=DEFAULT_WRAP_RATE_PCT,
            minimum_profit_rate=DEFAULT_MIN_PROFIT_RATE_PCT,
        )
        self._lock = threading.Lock()
        self._history: List[Dict[str, Any]] = []
        self._listeners: List[SettingsListener] = []

    def get_settings(self) -> SystemSettings:
        """Return the current snapshot. Never blocks."""
        return self._current

    def update_settings(
        self,
        wrap_rate: Optional[float] = None,
        minimum_profit_rate: Optional[float] = None,
        updated_by: Optional[str] = None,
    ) -> SystemSettings:
        """
        Apply a partial update and return the resulting snapshot.

        Args:
            wrap_rate: percent of annual salary, 0..1000
            minimum_profit_rate: percent of salary + wrap, 0..100
            updated_by: actor recorded in the snapshot and history

        The version only moves when a value actually changes.
        """
        if wrap_rate is not None:
            wrap_rate = _check_bounds("Wrap rate", wrap_rate, WRAP_RATE_BOUNDS)
        if minimum_profit_rate is not None:
            minimum_profit_rate = _check_bounds(
                "Minimum profit rate", minimum_profit_rate, MIN_PROFIT_RATE_BOUNDS
            )

        with self._lock:
            previous = self._current
            new_wrap = previous.wrap_rate if wrap_rate is None else wrap_rate
            new_profit = (
                previous.minimum_profit_rate if minimum_profit_rate is None else minimum_profit_rate
            )
            if new_wrap == previous.wrap_rate and new_profit == previous.minimum_profit_rate:
                return previous

            updated = SystemSettings(
                wrap_rate=new_wrap,
                minimum_profit_rate=new_profit,
                version=previous.version + 1,
                updated_at=datetime.now(timezone.utc),
                updated_by=updated_by,
            )
            self._current = updated
            self._history.append({
                "previous_wrap_rate": previous.wrap_rate,
                "new_wrap_rate": updated.wrap_rate,
                "previous_minimum_profit_rate": previous.minimum_profit_rate,
                "new_minimum_profit_rate": updated.minimum_profit_rate,
                "version": updated.version,
                "updated_by": updated_by,
                "updated_at": updated.updated_at.isoformat(),
            })
            listeners = list(self._listeners)

        logger.info(
            "system settings updated: wrap %.2f%% -> %.2f%%, min profit %.2f%% -> %.2f%%",
            previous.wrap_rate, updated.wrap_rate,
            previous.minimum_profit_rate, updated.minimum_profit_rate,
            extra={"settings_version": updated.version},
        )
        self._notify(listeners, updated)
        return updated

    def _notify(self, listeners: List[SettingsListener], settings: SystemSettings) -> None:
        for listener in listeners:
            try:
                listener(settings)
            except Exception:
                logger.warning(
                    "settings listener %r failed", listener,
                    exc_info=True, extra={"settings_version": settings.version},
                )

    def subscribe(self, listener: SettingsListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SettingsListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def get_history(self) -> List[Dict[str, Any]]:
        """Return the audit trail of settings changes."""
        with self._lock:
            return list(self._history)


# Module-level default store shared by callers that don't manage their own.
default_store = SystemSettingsStore()
