# TDX Feedback Ticket Creator
# Turns a feedback submission into a TDX ticket

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .client import TdxApiClient
from .helpers import build_title, build_description, stringify_keys, extract_ticket_id

logger = logging.getLogger(__name__)

DISABLED_ERROR = 'Ticket creation disabled'

# Payload keys sent only when configured
OPTIONAL_TICKET_FIELDS = {
    'FormID': 'form_id',
    'ServiceOfferingID': 'service_offering_id',
    'AccountID': 'account_id'
}


@dataclass(frozen=True)
class TicketResult:
    """Outcome of one ticket creation attempt"""

    success: bool
    ticket_id: Optional[Any] = None
    response: Optional[dict] = None
    error: Optional[Any] = None

    def __bool__(self):
        return self.success


class TicketCreator:
    """Create one TDX ticket per feedback submission.

    call() never raises. A failed or disabled ticket is reported through the
    returned TicketResult so the feedback itself still counts as accepted.
    """

    def __init__(self, config, client=None):
        self.config = config
        self.client = client or TdxApiClient.from_config(config)

    def call(self, feedback, requestor_email=None, extra_attributes=None):
        """Create a ticket for the feedback.

        Args:
            feedback: Anything with `message` and optional `context`
            requestor_email: Overrides the configured default requestor
            extra_attributes: Merged into the payload last, keys stringified

        Returns:
            TicketResult
        """
        if not self.config.enable_ticket_creation:
            return TicketResult(success=False, error=DISABLED_ERROR)

        try:
            payload = self.build_payload(feedback, requestor_email, extra_attributes)
            response = self.client.create_ticket(app_id=self.config.app_id, payload=payload)
            ticket_id = extract_ticket_id(response)
            logger.info(f"Created TDX ticket {ticket_id}")
            return TicketResult(success=True, ticket_id=ticket_id, response=response)

        except Exception as e:
            logger.warning(f"TDX ticket creation failed: {e!r}")
            return TicketResult(success=False, error=e)

    def build_payload(self, feedback, requestor_email=None, extra_attributes=None):
        """Ticket payload for a feedback submission, keyed by TDX field names"""
        config = self.config
        message = str(feedback.message or '')
        context = getattr(feedback, 'context', None)

        payload = {
            'TypeID': config.type_id,
            'StatusID': config.status_id,
            'SourceID': config.source_id,
            'ServiceID': config.service_id,
            'ResponsibleGroupID': config.responsible_group_id,
            'Title': build_title(config.title_prefix, message),
            'Description': build_description(message, context),
            'IsRichHtml': False
        }

        for key, setting in OPTIONAL_TICKET_FIELDS.items():
            value = getattr(config, setting)
            if value is not None:
                payload[key] = value

        email = requestor_email if requestor_email is not None else config.default_requestor_email
        if email is not None:
            payload['RequestorEmail'] = email

        if extra_attributes:
            payload.update(stringify_keys(extra_attributes))

        return payload
