"""SMS templates.

Bodies are single-line: whitespace is collapsed after substitution.
Use neutral quotes only; smart quotes are rejected by the SMS provider.
"""
from __future__ import annotations

from notifier.templates.base import StringTemplateRenderer

BOOKING_CHECKIN_REMINDER = StringTemplateRenderer(
    "booking_checkin_reminder",
    """
    Hi ${first_name}! Your check-in at ${property_name} is on ${checkin_date}
    at ${checkin_time}. Your door code is: ${door_code}. See you soon!
    """,
    defaults={
        "first_name": "Valued Member",
        "property_name": "Property",
        "checkin_date": "",
        "checkin_time": "3:00 PM",
        "door_code": "Not Available",
    },
    collapse_whitespace=True,
)

TWO_FACTOR_VERIFICATION = StringTemplateRenderer(
    "two_factor_verification",
    "Your verification code is ${verification_code}. It expires in ${expires_in_minutes} minutes.",
    defaults={"expires_in_minutes": 10},
    collapse_whitespace=True,
)

EMAIL_CHANGED = StringTemplateRenderer(
    "email_changed",
    """
    Your account email was changed to ${new_email}. If you did not make
    this change, contact us immediately.
    """,
    defaults={"new_email": "a new address"},
    collapse_whitespace=True,
)

PASSWORD_CHANGED = StringTemplateRenderer(
    "password_changed",
    """
    Your account password was changed. If you did not make this change,
    reset your password and contact us immediately.
    """,
    collapse_whitespace=True,
)


def default_sms_templates() -> list[StringTemplateRenderer]:
    return [BOOKING_CHECKIN_REMINDER, TWO_FACTOR_VERIFICATION, EMAIL_CHANGED, PASSWORD_CHANGED]
