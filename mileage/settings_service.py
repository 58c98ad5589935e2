"""SettingsService - owns the current settings for the rest of the app."""

from typing import Callable, List, Optional

from loguru import logger

from .dates import Moment, format_timestamp
from .settings import AppConfig, AppSettings, default_settings

Listener = Callable[[AppSettings], None]


class SettingsService:
    """
    Holds the process-wide settings and keeps them in sync with the store.

    Settings are loaded once on first access. Every change follows the same
    cycle: validate, replace in memory, persist, notify subscribers.
    """

    def __init__(self, store):
        self.store = store
        self._settings: Optional[AppSettings] = None
        self._listeners: List[Listener] = []
        # False when the last change stayed in memory only
        self.saved = True

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            self._settings = self.store.load_settings()
        return self._settings

    def load(self) -> AppSettings:
        """(Re)load settings from the store and notify subscribers."""
        self._settings = self.store.load_settings()
        self._notify()
        return self._settings

    reload = load

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for settings changes. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._settings)

    def _apply(self, settings: AppSettings) -> AppSettings:
        self._settings = settings
        self.saved = self.store.save_settings(settings)
        if not self.saved:
            logger.warning("Settings changed in memory but could not be saved")
        self._notify()
        return settings

    def update(self, **changes) -> AppSettings:
        """Apply a partial update. Invalid values raise before anything changes."""
        return self._apply(self.settings.merged(**changes))

    def reset(self, now: Optional[Moment] = None) -> AppSettings:
        """Replace the settings wholesale with fresh defaults."""
        logger.info("Resetting settings to defaults")
        return self._apply(default_settings(now))

    def complete_setup(
        self, start_date: Moment, initial_kilometers: Optional[int] = None
    ) -> AppSettings:
        """
        Record the initial configuration.

        Also writes the legacy config record, which keeps the initial
        reading unset when none was given.
        """
        start = format_timestamp(start_date)
        settings = self.update(
            start_date=start, initial_kilometers=initial_kilometers or 0
        )
        if not self.store.save_config(AppConfig(start, initial_kilometers)):
            self.saved = False
        return settings
