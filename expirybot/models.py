from __future__ import annotations

from dataclasses import dataclass

from expirybot.errors import CheckError

DEFAULT_THRESHOLD = 14


@dataclass(frozen=True)
class Domain:
    name: str
    threshold: int = DEFAULT_THRESHOLD


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one domain check.

    Exactly one of days_remaining / error is set.
    """

    domain: str
    threshold: int
    days_remaining: int | None = None
    error: CheckError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
