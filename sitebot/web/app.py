"""
Flask application for the SiteBot webhook and API.
"""

from flask import Flask, jsonify

from sitebot import SiteBot
from sitebot.config.settings import Config
from sitebot.utils.logging import setup_logging
from .routes import webhook_bp, search_bp, api_bp


def create_app(data_dir=None, debug=False, bot=None, webhook_async=True):
    """Create Flask application."""
    app = Flask(__name__)
    app.config['DEBUG'] = debug

    bot = bot or SiteBot(config=Config(data_dir=data_dir))
    app.config['SITEBOT'] = bot
    app.config['SITEBOT_CONFIG'] = bot.config
    app.config['WEBHOOK_ASYNC'] = webhook_async

    log_level = "DEBUG" if debug else bot.config.log_level
    setup_logging(log_level=log_level)

    app.register_blueprint(webhook_bp, url_prefix='/webhook')
    app.register_blueprint(search_bp, url_prefix='/api/search')
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.errorhandler(404)
    def not_found(error):
        """404 error handler."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """405 error handler."""
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """500 error handler."""
        return jsonify({'error': 'Internal server error'}), 500

    return app

