# TDX Feedback Helpers
# Payload building and response parsing shared by the client and ticket creator

import json
from enum import Enum

TITLE_MESSAGE_LENGTH = 80
CONTEXT_SEPARATOR = "\n--- Context ---\n"


def build_title(prefix, message):
    """Build a ticket title from the prefix and the start of the message.

    Takes the first 80 characters of the message and flattens newlines to
    spaces. The prefix is left off entirely when it is None.
    """
    snippet = (message or '')[:TITLE_MESSAGE_LENGTH].replace('\n', ' ')
    parts = [prefix, snippet]
    return ' '.join(part for part in parts if part is not None)


def build_description(message, context=None):
    """Message body, plus a context section when context is not blank"""
    description = message or ''
    if context is not None and str(context).strip():
        description += CONTEXT_SEPARATOR + str(context)
    return description


def stringify_keys(attributes):
    """Coerce mapping keys to strings (enum members use their value)"""
    result = {}
    for key, value in (attributes or {}).items():
        if isinstance(key, Enum):
            key = key.value
        result[str(key)] = value
    return result


def extract_ticket_id(response):
    """Pull the ticket ID out of a create-ticket response.

    TDX returns the ticket at the top level, but some gateways wrap it
    in a 'data' envelope.
    """
    if not isinstance(response, dict):
        return None

    ticket_id = response.get('ID')
    if ticket_id is not None:
        return ticket_id

    data = response.get('data')
    if isinstance(data, dict):
        return data.get('ID')
    return None


def parse_json_body(text):
    """Parse a response body leniently.

    Empty -> {}; invalid JSON -> {'raw': text}.
    """
    if text is None or not text.strip():
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return {'raw': text}
