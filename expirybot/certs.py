from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from cryptography import x509


@dataclass(frozen=True)
class CertWindow:
    not_before: datetime
    not_after: datetime


def read_cert_window(der: bytes) -> CertWindow:
    """Read the notBefore/notAfter window from a DER certificate."""

    cert = x509.load_der_x509_certificate(der)
    return CertWindow(
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
    )


def check_certificate(
    window: CertWindow, now: datetime | None = None
) -> tuple[bool, int]:
    """Return (is_valid, days_remaining) for a certificate window.

    Both ends of the window are inclusive. An invalid window always yields
    (False, 0); callers must test is_valid before reading the day count.
    Days are whole 24-hour periods truncated toward zero, so 14 days and
    23 hours counts as 14.
    """

    now = now or datetime.now(timezone.utc)
    if now < window.not_before or now > window.not_after:
        return False, 0

    hours = (window.not_after - now).total_seconds() / 3600
    return True, int(hours / 24)
