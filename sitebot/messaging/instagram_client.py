"""
Instagram messaging client used to deliver answers.
"""

import requests
from typing import Any, Dict, Optional

from ..config.settings import Config
from ..errors import DeliveryError
from ..utils.helpers import retry_on_exception
from ..utils.logging import get_logger


def is_transient_error(error: Exception) -> bool:
    """Connection problems, timeouts and 5xx answers are worth retrying; 4xx are not."""
    if isinstance(error, requests.HTTPError):
        response = error.response
        return response is not None and response.status_code >= 500
    return isinstance(error, (requests.ConnectionError, requests.Timeout))


class InstagramClient:
    """Sends direct messages and sender actions through the Graph API."""

    def __init__(self, config: Config, timeout: float = 10.0):
        """Initialize messaging client with configuration."""
        self.config = config
        self.timeout = timeout
        self.logger = get_logger(__name__)
        self.messages_url = f"{config.graph_api_url}/me/messages"

        self._post_with_retry = retry_on_exception(
            max_retries=config.delivery_max_retries,
            delay=0.5,
            exceptions=(requests.RequestException,),
            retry_if=is_transient_error,
        )(self._post)

    def _params(self) -> Dict[str, Optional[str]]:
        return {'access_token': self.config.page_access_token}

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = requests.post(self.messages_url, json=payload, params=self._params(),
                                 timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def send_message(self, recipient_id: str, text: str) -> Dict[str, Any]:
        """Send a text message, retrying transient failures."""
        payload = {
            'recipient': {'id': recipient_id},
            'message': {'text': text},
        }
        try:
            result = self._post_with_retry(payload)
        except requests.RequestException as e:
            self.logger.error(f"Error sending Instagram message to {recipient_id}: {e}")
            raise DeliveryError(f"Could not deliver message to {recipient_id}: {e}") from e

        self.logger.info(f"Message sent to {recipient_id}")
        return result

    def _sender_action(self, recipient_id: str, action: str) -> bool:
        """Best-effort sender action; failures are logged, not raised."""
        try:
            self._post({'recipient': {'id': recipient_id}, 'sender_action': action})
            return True
        except requests.RequestException as e:
            self.logger.warning(f"Error sending '{action}' to {recipient_id}: {e}")
            return False

    def send_typing_indicator(self, recipient_id: str) -> bool:
        """Show the typing indicator to the user."""
        return self._sender_action(recipient_id, 'typing_on')

    def mark_seen(self, recipient_id: str) -> bool:
        """Mark the user's last message as seen."""
        return self._sender_action(recipient_id, 'mark_seen')
