"""Escalation engine for overdue check-ins."""

import asyncio
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from checkin_watchdog.connectors.twilio_sms import NotificationTransport, TwilioSMSConnector
from checkin_watchdog.escalation.contacts import ContactDirectory
from checkin_watchdog.escalation.profiles import ProfileDirectory
from checkin_watchdog.escalation.states import WatchdogStateStore
from checkin_watchdog.models.contact import EmergencyContact
from checkin_watchdog.models.outcome import EscalationOutcome, OutcomeStatus
from checkin_watchdog.models.profile import Profile
from checkin_watchdog.models.watchdog_state import WatchdogState, as_utc
from checkin_watchdog.utils.logging import get_logger, log_escalation_event
from checkin_watchdog.utils.validation import mask_phone_number

logger = get_logger(__name__)

USER_NAME_TOKEN = "{user_name}"
INTERVAL_TOKEN = "{interval}"
TOKEN_PATTERN = re.compile(re.escape(USER_NAME_TOKEN) + "|" + re.escape(INTERVAL_TOKEN))


def format_interval(interval_hours: float) -> str:
    """Render an interval the way subjects configured it: ``24.0`` -> ``"24"``."""
    if float(interval_hours).is_integer():
        return str(int(interval_hours))
    return str(interval_hours)


def render_alert_message(template: str, user_name: str, interval_hours: float) -> str:
    """Fill every ``{user_name}`` and ``{interval}`` token in an alert template.

    Both tokens are substituted in one pass, so token text inside the
    substituted values is left alone.
    """
    values = {
        USER_NAME_TOKEN: user_name,
        INTERVAL_TOKEN: format_interval(interval_hours),
    }
    return TOKEN_PATTERN.sub(lambda match: values[match.group(0)], template)


class EscalationEngine:
    """Detects overdue subjects and notifies their emergency contacts.

    Each subject is escalated at most once per overdue episode: after the
    contacts have been tried the watchdog is marked alerted, whatever the
    individual deliveries returned.
    """

    def __init__(
        self,
        state_store: Optional[WatchdogStateStore] = None,
        profile_directory: Optional[ProfileDirectory] = None,
        contact_directory: Optional[ContactDirectory] = None,
        transport: Optional[NotificationTransport] = None
    ):
        self.state_store = state_store or WatchdogStateStore()
        self.profile_directory = profile_directory or ProfileDirectory()
        self.contact_directory = contact_directory or ContactDirectory()
        self.transport = transport or TwilioSMSConnector()

    @staticmethod
    def evaluate_overdue(states: Iterable[WatchdogState], now: datetime) -> List[WatchdogState]:
        """Return the states whose deadline has strictly passed at ``now``.

        States with no check-in yet, already alerted, or whose deadline
        cannot be represented (e.g. an interval of ``inf``) are never overdue.
        """
        now = as_utc(now)
        overdue = []
        for state in states:
            if state.alert_sent:
                continue
            try:
                deadline = state.deadline
            except (OverflowError, ValueError) as e:
                logger.warning("Unrepresentable check-in deadline, skipping subject",
                               subject_id=state.user_id,
                               interval_hours=state.check_in_interval_hours,
                               error=str(e))
                continue
            if deadline is not None and now > deadline:
                overdue.append(state)
        return overdue

    async def handle_overdue_subject(self, state: WatchdogState) -> EscalationOutcome:
        """Look up a subject's profile and contacts, then escalate.

        Failures are contained to this subject and reported as an
        ``error`` outcome.
        """
        try:
            profile = await self.profile_directory.get_profile(state.user_id)
            contacts = await self.contact_directory.get_contacts_ordered_by_priority(state.user_id)
            return await self.escalate(state, profile, contacts, state.alert_message)

        except Exception as e:
            logger.error("Error escalating subject",
                         subject_id=state.user_id,
                         error=str(e),
                         exc_info=True)
            outcome = EscalationOutcome(state.user_id, OutcomeStatus.ERROR, 0)
            log_escalation_event(logger, state.user_id, outcome.status.value, 0)
            return outcome

    async def escalate(
        self,
        state: WatchdogState,
        profile: Optional[Profile],
        contacts: Sequence[EmergencyContact],
        template: str
    ) -> EscalationOutcome:
        """Send the alert to every contact and mark the watchdog alerted."""
        if not contacts:
            logger.warning("No emergency contacts found", subject_id=state.user_id)
            outcome = EscalationOutcome(state.user_id, OutcomeStatus.SKIPPED_NO_CONTACTS, 0)
            log_escalation_event(logger, state.user_id, outcome.status.value, 0)
            return outcome

        user_name = self.profile_directory.resolve_display_name(profile)
        message = render_alert_message(template, user_name, state.check_in_interval_hours)

        ordered = sorted(contacts, key=lambda contact: contact.priority)
        results = await asyncio.gather(
            *(self.transport.send(contact.phone_number, message) for contact in ordered),
            return_exceptions=True
        )

        notified = 0
        for contact, result in zip(ordered, results):
            if isinstance(result, BaseException):
                logger.error("SMS delivery raised",
                             subject_id=state.user_id,
                             contact_name=contact.name,
                             to_number=mask_phone_number(contact.phone_number),
                             error=str(result))
            elif result:
                notified += 1
            else:
                logger.warning("SMS delivery failed",
                               subject_id=state.user_id,
                               contact_name=contact.name,
                               to_number=mask_phone_number(contact.phone_number))

        alerted_at = datetime.now(timezone.utc)
        await self.state_store.set_alerted(state.user_id, alerted_at)
        state.mark_alerted(alerted_at)

        outcome = EscalationOutcome(state.user_id, OutcomeStatus.ALERTED, notified)
        log_escalation_event(
            logger,
            state.user_id,
            outcome.status.value,
            notified,
            contacts_attempted=len(ordered)
        )
        return outcome
