#!/usr/bin/env python3
"""
Run script for the SiteBot webhook service.

Models and the embeddings snapshot are loaded before the server starts
accepting messages unless ``--lazy`` is given.
"""

import os
import sys
import argparse
from pathlib import Path

# Add the project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from sitebot.errors import SiteBotError
from sitebot.utils.logging import get_logger
from sitebot.web.app import create_app

logger = get_logger("sitebot.run_web")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='SiteBot webhook service')
    parser.add_argument('--host', default=os.getenv('SITEBOT_HOST', '0.0.0.0'), help='Host to bind to')
    parser.add_argument('--port', type=int, default=int(os.getenv('PORT', '5000')), help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')
    parser.add_argument('--data-dir', help='Data directory path')
    parser.add_argument('--lazy', action='store_true',
                        help='Load models on the first message instead of at startup')
    parser.add_argument('--sync', action='store_true',
                        help='Answer webhook messages on the request thread')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    app = create_app(data_dir=args.data_dir, debug=args.debug, webhook_async=not args.sync)
    bot = app.config['SITEBOT']

    if not bot.config.meta_app_secret:
        logger.warning("META_APP_SECRET is not set; every webhook POST will be rejected")

    if not args.lazy:
        try:
            bot.get_responder()
        except (SiteBotError, OSError) as e:
            logger.error(f"Could not load models: {e}")
            return 1

    logger.info(f"Webhook endpoint: http://{args.host}:{args.port}/webhook")
    app.run(host=args.host, port=args.port, debug=args.debug, use_reloader=False)
    return 0


if __name__ == '__main__':
    sys.exit(main())
