"""One-time numeric codes for password resets and two-step login."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum

from ..config import settings
from ..metrics import otp_issued_total, otp_rejected_total
from ..repositories import verification_codes

logger = logging.getLogger(__name__)


class OtpPurpose(str, Enum):
    password_reset = "password_reset"
    login = "login"


def generate_code() -> str:
    """Six digits, never starting with zero."""
    return str(100_000 + secrets.randbelow(900_000))


async def issue_code(
    email: str, purpose: OtpPurpose, *, now: datetime | None = None
) -> tuple[str, datetime]:
    now = now or datetime.now(timezone.utc)
    code = generate_code()
    expires_at = now + timedelta(minutes=settings.otp_ttl_minutes)
    await verification_codes.upsert_code(email, purpose.value, code, expires_at)
    otp_issued_total.labels(purpose=purpose.value).inc()
    logger.info("Issued one-time code", extra={"purpose": purpose.value})
    return code, expires_at


async def verify_code(
    email: str, purpose: OtpPurpose, code: str, *, now: datetime | None = None
) -> bool:
    """Exact match on a pending, unexpired code.

    Wrong guesses are counted; reaching ``otp_max_attempts`` burns the code.
    """
    now = now or datetime.now(timezone.utc)
    record = await verification_codes.get_pending_code(email, purpose.value, now)
    if record is None:
        otp_rejected_total.labels(reason="missing_or_expired").inc()
        return False
    if secrets.compare_digest(str(record.get("code", "")), (code or "").strip()):
        return True

    attempts = await verification_codes.record_failed_attempt(email, purpose.value)
    if attempts >= settings.otp_max_attempts:
        await verification_codes.delete_code(email, purpose.value)
        otp_rejected_total.labels(reason="locked").inc()
        logger.warning(
            "One-time code discarded after too many attempts",
            extra={"purpose": purpose.value, "attempts": attempts},
        )
    else:
        otp_rejected_total.labels(reason="mismatch").inc()
    return False


async def consume_code(email: str, purpose: OtpPurpose) -> None:
    await verification_codes.delete_code(email, purpose.value)


__all__ = ["OtpPurpose", "consume_code", "generate_code", "issue_code", "verify_code"]
