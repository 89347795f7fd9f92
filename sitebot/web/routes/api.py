"""
General API routes.
"""

from flask import Blueprint, jsonify, current_app
from sitebot import __version__, __author__

api_bp = Blueprint('api', __name__)


@api_bp.route('/health', methods=['GET'])
def health():
    """Health check endpoint; also reports whether an index has been built."""
    config = current_app.config['SITEBOT_CONFIG']
    return jsonify({
        'status': 'healthy',
        'version': __version__,
        'author': __author__,
        'snapshot_available': config.snapshot_file.exists(),
    })


@api_bp.route('/config', methods=['GET'])
def get_config():
    """Get current non-secret configuration."""
    config = current_app.config['SITEBOT_CONFIG']

    return jsonify({
        'data_dir': str(config.data_dir),
        'start_url': config.start_url,
        'embedding_model': config.embedding_model,
        'generator_model': config.generator_model,
        'device': config.device,
        'default_top_k': config.default_top_k,
        'response_timeout': config.response_timeout,
        'crawl': {
            'max_depth': config.crawl_max_depth,
            'max_pages': config.crawl_max_pages,
            'same_domain_only': config.crawl_same_domain_only,
        },
        'chunking': {
            'max_length': config.chunk_max_length,
            'min_length': config.chunk_min_length,
        },
    })
