"""
Instagram webhook routes.
"""

import json
import threading
from flask import Blueprint, request, jsonify, current_app

from ...errors import PayloadError, SiteBotError
from ...utils.logging import get_logger
from ..payloads import IncomingMessage, parse_webhook_payload
from ..security import verify_webhook_signature

webhook_bp = Blueprint('webhook', __name__)
logger = get_logger(__name__)


def handle_incoming_message(bot, message: IncomingMessage) -> None:
    """Answer one message and deliver the reply, falling back to an apology."""
    messenger = bot.get_messenger()
    logger.info(f"Received message from {message.sender_id}: {message.text}")

    try:
        messenger.mark_seen(message.sender_id)
        messenger.send_typing_indicator(message.sender_id)
        answer = bot.get_responder().respond(message.text)
        messenger.send_message(message.sender_id, answer)
        logger.info(f"Sent response to {message.sender_id}")
    except Exception as e:
        logger.error(f"Error handling message from {message.sender_id}: {e}")
        try:
            messenger.send_message(message.sender_id, bot.config.error_message)
        except SiteBotError as fallback_error:
            logger.error(f"Error sending fallback message: {fallback_error}")


def dispatch(bot, message: IncomingMessage) -> None:
    """Handle a message off the request thread unless the app runs synchronously."""
    if not current_app.config.get('WEBHOOK_ASYNC', True):
        handle_incoming_message(bot, message)
        return

    worker = threading.Thread(
        target=handle_incoming_message,
        args=(bot, message),
        name=f"sitebot-message-{message.sender_id}",
        daemon=True,
    )
    worker.start()


@webhook_bp.route('', methods=['GET'])
def verify_subscription():
    """Webhook verification handshake from Meta."""
    config = current_app.config['SITEBOT_CONFIG']
    mode = request.args.get('hub.mode')
    token = request.args.get('hub.verify_token')
    challenge = request.args.get('hub.challenge', '')

    if mode == 'subscribe' and config.meta_verify_token and token == config.meta_verify_token:
        logger.info("Webhook verified successfully")
        return challenge, 200

    logger.warning("Webhook verification failed")
    return 'Forbidden', 403


@webhook_bp.route('', methods=['POST'])
def receive_events():
    """Receive message events; replies are produced asynchronously."""
    config = current_app.config['SITEBOT_CONFIG']
    raw_body = request.get_data()
    signature = request.headers.get('X-Hub-Signature-256')

    if not verify_webhook_signature(raw_body, signature, config.meta_app_secret):
        logger.warning(f"Invalid webhook signature (payload length {len(raw_body)})")
        return jsonify({'error': 'Invalid signature'}), 403

    try:
        body = json.loads(raw_body.decode('utf-8'))
        messages = parse_webhook_payload(body)
    except (ValueError, PayloadError) as e:
        logger.error(f"Malformed webhook payload: {e}")
        return jsonify({'error': 'Malformed payload'}), 400

    bot = current_app.config['SITEBOT']
    for message in messages:
        dispatch(bot, message)

    return jsonify({'success': True}), 200
