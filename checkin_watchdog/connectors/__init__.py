"""Messaging connectors for the check-in watchdog."""

from .twilio_sms import NotificationTransport, TwilioSMSConnector

__all__ = [
    "NotificationTransport",
    "TwilioSMSConnector",
]
