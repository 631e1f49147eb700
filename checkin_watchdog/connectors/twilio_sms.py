"""Twilio SMS connector for sending check-in alerts."""

import asyncio
import time
from typing import Any, Optional, Protocol

from twilio.rest import Client
from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient

from checkin_watchdog.config import settings
from checkin_watchdog.utils.logging import get_logger, log_sms_delivery
from checkin_watchdog.utils.validation import mask_phone_number, validate_phone

logger = get_logger(__name__)

# SMS limit with buffer
MAX_BODY_LENGTH = 1600

# The HTTP timeout applies per connect/read phase; the outer guard allows both
OUTER_TIMEOUT_FACTOR = 2


class NotificationTransport(Protocol):
    """Sends one text message to one phone number."""

    async def send(self, to_number: str, body: str) -> bool:
        ...


class TwilioSMSConnector:
    """Twilio SMS connector.

    When any of the Twilio credentials are missing the connector runs in
    dry-run mode: intended sends are logged and reported as delivered, so
    the rest of an escalation behaves exactly as with real delivery.
    """

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[Any] = None
    ):
        self.account_sid = settings.TWILIO_ACCOUNT_SID if account_sid is None else account_sid
        self.auth_token = settings.TWILIO_AUTH_TOKEN if auth_token is None else auth_token
        self.from_number = settings.TWILIO_FROM_NUMBER if from_number is None else from_number
        self.timeout_seconds = timeout_seconds or settings.SMS_TIMEOUT_SECONDS

        self.enabled = bool(self.account_sid and self.auth_token and self.from_number)

        if client is not None:
            self.client = client
        elif self.enabled:
            self.client = Client(
                self.account_sid,
                self.auth_token,
                http_client=TwilioHttpClient(timeout=self.timeout_seconds)
            )
        else:
            self.client = None
            logger.warning("Twilio credentials not configured, SMS runs in dry-run mode")

    @property
    def dry_run(self) -> bool:
        return self.client is None

    async def send(self, to_number: str, body: str) -> bool:
        """Send one SMS. Returns True if Twilio accepted it (or in dry-run mode)."""
        if self.dry_run:
            logger.info(
                "[MOCK] SMS not sent, Twilio not configured",
                to_number=mask_phone_number(to_number),
                message_length=len(body)
            )
            return True

        if not validate_phone(to_number):
            logger.error("Invalid phone number format", to_number=mask_phone_number(to_number))
            return False

        started = time.monotonic()
        error_code = None
        try:
            message_sid = await asyncio.wait_for(
                asyncio.to_thread(self._create_message, to_number, body),
                timeout=self.timeout_seconds * OUTER_TIMEOUT_FACTOR
            )
        except asyncio.TimeoutError:
            error = f"timed out after {self.timeout_seconds}s"
        except TwilioException as e:
            error_code = getattr(e, 'code', None)
            error = str(e)
        except Exception as e:
            # HTTP timeouts and connection errors surface from the transport layer
            error = str(e)
        else:
            log_sms_delivery(
                logger,
                to_number,
                success=True,
                duration_ms=(time.monotonic() - started) * 1000,
                message_sid=message_sid,
                message_length=len(body)
            )
            return True

        log_sms_delivery(
            logger,
            to_number,
            success=False,
            duration_ms=(time.monotonic() - started) * 1000,
            error_code=error_code,
            error=error
        )
        return False

    def _create_message(self, to_number: str, body: str) -> str:
        message_obj = self.client.messages.create(
            body=body[:MAX_BODY_LENGTH],
            from_=self.from_number,
            to=to_number
        )
        return message_obj.sid
