"""Application settings and the legacy setup config record."""

import re
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, Optional

from .dates import Moment, add_years, format_timestamp, parse_timestamp, utc_now
from .errors import InvalidInputError

YEARLY_LIMIT = 10000
THEMES = ("dark", "light", "auto")
LANGUAGES = ("es", "en")
HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

# Persisted defaults (camelCase, as stored). startDate is filled in when
# the defaults are built since it depends on the current instant.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "yearlyLimit": YEARLY_LIMIT,
    "accentColor": "#CC0000",
    "initialKilometers": 0,
    "theme": "dark",
    "language": "es",
}


def _now_timestamp() -> str:
    return format_timestamp(utc_now())


@dataclass
class AppSettings:
    """User configuration for the rolling annual allowance."""

    yearly_limit: int = YEARLY_LIMIT
    accent_color: str = DEFAULT_SETTINGS["accentColor"]
    start_date: str = field(default_factory=_now_timestamp)
    initial_kilometers: Optional[int] = 0
    theme: Optional[str] = DEFAULT_SETTINGS["theme"]
    language: Optional[str] = DEFAULT_SETTINGS["language"]

    def __post_init__(self):
        """Reject values the calculation engine cannot work with."""
        if isinstance(self.yearly_limit, bool) or not isinstance(self.yearly_limit, int):
            raise InvalidInputError("yearly limit must be a whole number of km")
        if self.yearly_limit <= 0:
            raise InvalidInputError("yearly limit must be > 0")
        if self.initial_kilometers is not None:
            km = self.initial_kilometers
            if isinstance(km, bool) or not isinstance(km, int):
                raise InvalidInputError("initial kilometers must be a whole number of km")
            if km < 0:
                raise InvalidInputError("initial kilometers must be >= 0")
        if not HEX_COLOR.match(self.accent_color or ""):
            raise InvalidInputError(f"invalid accent color: {self.accent_color!r}")
        if self.theme is not None and self.theme not in THEMES:
            raise InvalidInputError(f"theme must be one of {', '.join(THEMES)}")
        if self.language is not None and self.language not in LANGUAGES:
            raise InvalidInputError(f"language must be one of {', '.join(LANGUAGES)}")
        try:
            if not isinstance(self.start_date, str):
                self.start_date = format_timestamp(self.start_date)
            # The period end must be representable too
            add_years(parse_timestamp(self.start_date), 1)
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidInputError(f"invalid start date: {self.start_date!r}") from e

    @property
    def period_start(self) -> datetime:
        return parse_timestamp(self.start_date)

    @property
    def period_end(self) -> datetime:
        """End of the rolling period: start date plus one year."""
        return add_years(self.period_start, 1)

    def merged(self, **changes) -> "AppSettings":
        """Return a copy with the given fields replaced (validated)."""
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise InvalidInputError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted dict format (camelCase keys)."""
        d: Dict[str, Any] = {
            "yearlyLimit": self.yearly_limit,
            "accentColor": self.accent_color,
            "startDate": self.start_date,
        }
        if self.initial_kilometers is not None:
            d["initialKilometers"] = self.initial_kilometers
        if self.theme is not None:
            d["theme"] = self.theme
        if self.language is not None:
            d["language"] = self.language
        return d

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "AppSettings":
        return cls(
            yearly_limit=dct["yearlyLimit"],
            accent_color=dct["accentColor"],
            start_date=dct["startDate"],
            initial_kilometers=dct.get("initialKilometers"),
            theme=dct.get("theme"),
            language=dct.get("language"),
        )


def default_settings_dict(now: Optional[Moment] = None) -> Dict[str, Any]:
    """DEFAULT_SETTINGS with startDate set to ``now``."""
    return {
        **DEFAULT_SETTINGS,
        "startDate": format_timestamp(now if now is not None else utc_now()),
    }


def default_settings(now: Optional[Moment] = None) -> AppSettings:
    return AppSettings.from_dict(default_settings_dict(now))


def merge_settings(persisted: Dict[str, Any], now: Optional[Moment] = None) -> AppSettings:
    """Build settings from a persisted partial record layered over defaults."""
    return AppSettings.from_dict({**default_settings_dict(now), **persisted})


class AppConfig:
    """Legacy setup record kept alongside the settings."""

    def __init__(self, start_date: str, initial_kilometers: Optional[int] = None):
        self.start_date = start_date
        self.initial_kilometers = initial_kilometers

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"startDate": self.start_date}
        if self.initial_kilometers is not None:
            d["initialKilometers"] = self.initial_kilometers
        return d

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "AppConfig":
        return cls(dct["startDate"], dct.get("initialKilometers"))
