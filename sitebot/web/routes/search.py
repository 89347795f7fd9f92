"""
Search and question-answering API routes.
"""

from flask import Blueprint, request, jsonify, current_app

from sitebot.errors import EmbeddingError, GenerationError, ResponseTimeout
from sitebot.utils.helpers import Timer
from sitebot.utils.logging import get_logger

search_bp = Blueprint('search', __name__)
logger = get_logger(__name__)


def _read_query():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get('query'), str):
        return None, (jsonify({'error': 'Query is required'}), 400)

    query = data['query'].strip()
    if not query:
        return None, (jsonify({'error': 'Query cannot be empty'}), 400)
    return data, None


@search_bp.route('', methods=['POST'])
def search():
    """Return the chunks ranked for a query."""
    data, error = _read_query()
    if error:
        return error

    query = data['query'].strip()
    top_k = data.get('top_k')
    if top_k is not None and (not isinstance(top_k, int) or top_k <= 0):
        return jsonify({'error': 'top_k must be a positive integer'}), 400

    bot = current_app.config['SITEBOT']
    try:
        with Timer() as timer:
            results = bot.get_retriever().search(query, top_k=top_k)
    except EmbeddingError as e:
        logger.error(f"Search error: {e}")
        return jsonify({'error': str(e)}), 502

    return jsonify({
        'query': query,
        'results': [
            {
                'rank': i + 1,
                'score': result.score,
                'url': result.chunk.source_url,
                'title': result.chunk.title,
                'text': result.chunk.text,
            }
            for i, result in enumerate(results)
        ],
        'total_results': len(results),
        'search_time_ms': int(timer.elapsed * 1000),
    })


@search_bp.route('/ask', methods=['POST'])
def ask():
    """Answer a question with retrieval-augmented generation."""
    data, error = _read_query()
    if error:
        return error

    query = data['query'].strip()
    bot = current_app.config['SITEBOT']
    try:
        answer = bot.get_responder().respond(query)
    except ResponseTimeout as e:
        logger.error(f"Ask timed out: {e}")
        return jsonify({'error': str(e)}), 504
    except (EmbeddingError, GenerationError) as e:
        logger.error(f"Ask error: {e}")
        return jsonify({'error': str(e)}), 502

    return jsonify({'query': query, 'answer': answer})
