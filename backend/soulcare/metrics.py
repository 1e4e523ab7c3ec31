from __future__ import annotations

from prometheus_client import Counter

auth_login_total = Counter(
    "soulcare_auth_login_total",
    "Login attempts grouped by outcome.",
    ["outcome"],
)
otp_issued_total = Counter(
    "soulcare_otp_issued_total",
    "One-time codes issued, by purpose.",
    ["purpose"],
)
otp_rejected_total = Counter(
    "soulcare_otp_rejected_total",
    "One-time code verifications that failed, by reason.",
    ["reason"],
)
mail_failed_total = Counter(
    "soulcare_mail_failed_total",
    "Outgoing emails that could not be delivered to the SMTP relay.",
)
storage_delete_failed_total = Counter(
    "soulcare_storage_delete_failed_total",
    "Object storage deletions that failed and were skipped.",
)
