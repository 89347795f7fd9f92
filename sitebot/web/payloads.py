"""
Typed parsing of incoming Instagram webhook payloads.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from ..errors import PayloadError


@dataclass(frozen=True)
class IncomingMessage:
    """A text message sent to the page by a user."""
    sender_id: str
    text: str
    timestamp: Optional[int] = None


def _as_list(value: Any, name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise PayloadError(f"'{name}' must be a list")
    return value


def parse_webhook_payload(body: Any) -> List[IncomingMessage]:
    """Extract text messages from a webhook body.

    Events other than text messages (reactions, reads, echoes without text)
    are ignored. Structurally malformed bodies raise PayloadError.
    """
    if not isinstance(body, dict):
        raise PayloadError("Webhook body must be a JSON object")

    if body.get('object') != 'instagram':
        return []

    messages = []
    for entry in _as_list(body.get('entry'), 'entry'):
        if not isinstance(entry, dict):
            raise PayloadError("Each entry must be an object")

        for event in _as_list(entry.get('messaging'), 'messaging'):
            if not isinstance(event, dict):
                raise PayloadError("Each messaging event must be an object")

            message = event.get('message')
            if not isinstance(message, dict) or message.get('is_echo'):
                continue
            text = message.get('text')
            if not isinstance(text, str) or not text.strip():
                continue

            sender = event.get('sender')
            sender_id = sender.get('id') if isinstance(sender, dict) else None
            if not isinstance(sender_id, (str, int)) or isinstance(sender_id, bool):
                raise PayloadError("Message event is missing 'sender.id'")

            timestamp = event.get('timestamp')
            messages.append(IncomingMessage(
                sender_id=str(sender_id),
                text=text,
                timestamp=timestamp if isinstance(timestamp, int) else None,
            ))

    return messages
