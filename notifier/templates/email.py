"""Email templates.

A rendered email carries its subject on the first line, followed by a
blank line and the body.  :func:`split_subject` undoes that framing for
the SMTP sender.
"""
from __future__ import annotations

from notifier.templates.base import StringTemplateRenderer

DEFAULT_SUBJECT = "Notification"

BOOKING_CHECKIN_REMINDER = StringTemplateRenderer(
    "booking_checkin_reminder",
    """\
Check-in reminder: ${property_name} on ${checkin_date}

Hi ${first_name},

This is a reminder that your check-in at ${property_name} is on
${checkin_date} at ${checkin_time}.

Your door code is: ${door_code}

See you soon!
""",
    defaults={
        "first_name": "Valued Member",
        "property_name": "Property",
        "checkin_date": "",
        "checkin_time": "3:00 PM",
        "door_code": "Not Available",
    },
)

PASSWORD_CHANGED = StringTemplateRenderer(
    "password_changed",
    """\
Your password was changed

Hi ${first_name},

The password for your account was changed. If you did not make this
change, reset your password and contact us immediately.
""",
    defaults={"first_name": "there"},
)

EMAIL_CHANGED = StringTemplateRenderer(
    "email_changed",
    """\
Your email address was changed

Hi ${first_name},

The email address on your account was changed to ${new_email}. If you
did not make this change, contact us immediately.
""",
    defaults={"first_name": "there", "new_email": "a new address"},
)


def default_email_templates() -> list[StringTemplateRenderer]:
    return [BOOKING_CHECKIN_REMINDER, PASSWORD_CHANGED, EMAIL_CHANGED]


def split_subject(rendered: str) -> tuple[str, str]:
    """Return ``(subject, body)`` from a rendered email.

    Without the blank-line framing, the whole text is the body and the
    subject is :data:`DEFAULT_SUBJECT`.
    """
    head, separator, body = rendered.partition("\n\n")
    if not separator or "\n" in head.strip():
        return DEFAULT_SUBJECT, rendered
    return head.strip(), body.strip()
