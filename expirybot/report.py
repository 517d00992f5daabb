from __future__ import annotations

from expirybot.models import CheckResult

SUCCESS_MARK = "[✓]"
FAILURE_MARK = "[✗]"


def format_result(result: CheckResult) -> str | None:
    """Render the status line for a result, or None for a silent pass.

    A valid certificate is reported only when it expires within the
    threshold (inclusive); every failure is reported with its cause.
    """

    if not result.ok:
        return f"{FAILURE_MARK} {result.domain} - {result.error.cause}"

    if result.days_remaining <= result.threshold:
        return (
            f"{SUCCESS_MARK} {result.domain} - "
            f"Certificate expires in {result.days_remaining} days"
        )

    return None
