# aplyease/services/notifications.py
from .analytics import HIGH_QUOTA_THRESHOLD
from .email_service import send_email


def email_quota_low(client) -> bool:
    """Tell a client their quota just dropped into the high-priority band."""
    if not getattr(client, "email", None):
        return False
    remaining = client.applications_remaining or 0
    if remaining != HIGH_QUOTA_THRESHOLD:
        return False
    return bool(send_email(
        to=client.email,
        subject=f"{remaining} applications left on your AplyEase plan",
        template="quota_low.html",
        client=client,
        remaining=remaining,
    ))
