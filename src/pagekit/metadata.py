"""
Page metadata and review scheduling.

``PageMetadata`` validates the front-matter mapping of a page. The four
keys the layout knows about are typed; anything else is kept as an extra
and passed through to templates untouched.

Review scheduling follows the ``last_reviewed_on`` + ``review_in``
convention: a page reviewed on 2026-04-02 with ``review_in: 6 months`` must
be reviewed again by 2026-10-02.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from pagekit.errors import MetadataError, ReviewIntervalError

_INTERVAL_RE = re.compile(
    r"^\s*(?:every\s+)?(?P<count>\d+)\s*(?P<unit>day|week|month|year)s?\s*$",
    re.IGNORECASE,
)


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


@dataclass(frozen=True)
class ReviewInterval:
    """A parsed ``review_in`` value such as ``6 months``."""

    count: int
    unit: str

    @classmethod
    def parse(cls, text: Any) -> ReviewInterval:
        """Parse ``<n> day|week|month|year[s]``, optionally prefixed by "every"."""
        if not isinstance(text, str):
            raise ReviewIntervalError(text)
        match = _INTERVAL_RE.match(text)
        if match is None:
            raise ReviewIntervalError(text)
        count = int(match.group("count"))
        if count <= 0:
            raise ReviewIntervalError(text, "Review interval must be positive")
        return cls(count=count, unit=match.group("unit").lower())

    def add_to(self, start: date) -> date:
        if self.unit == "day":
            return start + timedelta(days=self.count)
        if self.unit == "week":
            return start + timedelta(weeks=self.count)
        if self.unit == "month":
            return _add_months(start, self.count)
        return _add_months(start, 12 * self.count)

    def __str__(self) -> str:
        suffix = "" if self.count == 1 else "s"
        return f"{self.count} {self.unit}{suffix}"


class ReviewState(str, Enum):
    OK = "ok"
    DUE_SOON = "due_soon"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ReviewStatus:
    state: ReviewState
    review_by: date | None = None
    days_remaining: int | None = None

    @property
    def is_expired(self) -> bool:
        return self.state is ReviewState.EXPIRED

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "review_by": self.review_by.isoformat() if self.review_by else None,
            "days_remaining": self.days_remaining,
        }


class PageMetadata(BaseModel):
    """Validated front matter of a page.

    Unknown keys are allowed and kept as extras so templates can reach
    them through ``current_page.data``.
    """

    model_config = ConfigDict(extra="allow")

    title: str = ""
    last_reviewed_on: date | None = None
    review_in: str | None = None
    owner_slack: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("review_in", "owner_slack", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("last_reviewed_on", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> PageMetadata:
        """Validate a front-matter mapping.

        Raises:
            MetadataError: naming the first offending field and its value
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            loc = first.get("loc") or ()
            field_name = str(loc[0]) if loc else None
            raise MetadataError(
                f"Invalid value for {field_name}: {first.get('msg')}",
                field=field_name,
                value=first.get("input"),
                cause=e,
            ) from e

    @property
    def data(self) -> dict[str, Any]:
        """All front-matter values, typed keys and extras alike."""
        return self.model_dump()

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    @property
    def review_interval(self) -> ReviewInterval | None:
        if self.review_in is None:
            return None
        return ReviewInterval.parse(self.review_in)

    def review_by(self) -> date | None:
        interval = self.review_interval
        if interval is None or self.last_reviewed_on is None:
            return None
        return interval.add_to(self.last_reviewed_on)

    def review_status(
        self,
        today: date | None = None,
        warn_within_days: int = 30,
    ) -> ReviewStatus:
        """Where this page stands against its review schedule.

        Raises:
            ReviewIntervalError: ``review_in`` is set but unparseable
        """
        review_by = self.review_by()
        if review_by is None:
            return ReviewStatus(state=ReviewState.UNKNOWN)

        today = today or date.today()
        remaining = (review_by - today).days
        if remaining < 0:
            state = ReviewState.EXPIRED
        elif remaining <= warn_within_days:
            state = ReviewState.DUE_SOON
        else:
            state = ReviewState.OK
        return ReviewStatus(state=state, review_by=review_by, days_remaining=remaining)

    def missing(self, required_keys: list[str]) -> list[str]:
        """Required keys that are absent or blank."""
        data = self.data
        absent = []
        for key in required_keys:
            value = data.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                absent.append(key)
        return absent


__all__ = [
    "PageMetadata",
    "ReviewInterval",
    "ReviewState",
    "ReviewStatus",
]
