from flask import Blueprint, request, jsonify, current_app

from ..errors import NewsroomError
from ..utils.serialization import category_to_json, topic_to_json
from .main import error_response, services

generation_bp = Blueprint('generation', __name__)


@generation_bp.route('/search', methods=['GET'])
def search():
    """
    Search stored articles, generating a new one when storage has too few matches.
    Query parameters: q
    """
    query = request.args.get('q', '', type=str)
    try:
        result = services()['orchestrator'].satisfy_query(query)
    except NewsroomError as e:
        return error_response(e, parse_message="Search failed")
    except Exception as e:
        current_app.logger.error(f"Search error: {e}", exc_info=True)
        return jsonify({"error": "Search failed"}), 500
    return jsonify(result), 200


@generation_bp.route('/auto-generate', methods=['POST'])
def auto_generate():
    """Generate front-page articles from the top trending topics."""
    try:
        result = services()['orchestrator'].refill_front_page()
    except NewsroomError as e:
        return error_response(e, parse_message="Failed to auto-generate articles")
    except Exception as e:
        current_app.logger.error(f"Auto-generate error: {e}", exc_info=True)
        return jsonify({"error": "Failed to auto-generate articles"}), 500
    return jsonify({"success": True, **result}), 200


@generation_bp.route('/auto-generate', methods=['GET'])
def auto_generate_status():
    try:
        return jsonify(services()['orchestrator'].generation_status()), 200
    except NewsroomError as e:
        return jsonify({"error": "Failed to check status"}), e.status_code


def _topics_payload(category=None):
    store = services()['store']
    return {
        "topics": [topic_to_json(t) for t in store.list_topics(category=category)],
        "categories": [category_to_json(c) for c in store.list_categories()],
    }


@generation_bp.route('/trending', methods=['GET'])
def get_trending():
    """
    Stored trending topics, highest score first.
    Query parameters: category, refresh ("true" refreshes first, best effort)
    """
    category = request.args.get('category', type=str)
    if request.args.get('refresh', '', type=str).lower() == 'true':
        try:
            services()['orchestrator'].refresh_trending_topics()
        except NewsroomError as e:
            current_app.logger.warning(f"Trending refresh failed, serving stored topics: {e}")

    try:
        return jsonify(_topics_payload(category)), 200
    except NewsroomError as e:
        return jsonify({"error": "Failed to fetch trending topics"}), e.status_code


@generation_bp.route('/trending', methods=['POST'])
def refresh_trending():
    """Force a trending-topic refresh."""
    try:
        added = services()['orchestrator'].refresh_trending_topics()
        topics = services()['store'].list_topics()
    except NewsroomError as e:
        return error_response(e, parse_message="Failed to refresh trending topics")
    except Exception as e:
        current_app.logger.error(f"Error refreshing topics: {e}", exc_info=True)
        return jsonify({"error": "Failed to refresh trending topics"}), 500

    return jsonify({
        "success": True,
        "message": "Trending topics refreshed",
        "added": added,
        "topics": [topic_to_json(t) for t in topics],
    }), 200


@generation_bp.route('/fact-check', methods=['POST'])
def fact_check():
    """
    Fact-check one article; the verdict is cached on the article.
    Expects JSON body: {"articleId": "..."}
    """
    data = request.get_json(silent=True) or {}
    article_id = data.get('articleId') if isinstance(data, dict) else None
    try:
        result = services()['orchestrator'].fact_check(article_id)
    except NewsroomError as e:
        return error_response(e, parse_message="Failed to perform fact-check")
    except Exception as e:
        current_app.logger.error(f"Fact-check error: {e}", exc_info=True)
        return jsonify({"error": "Failed to perform fact-check"}), 500
    return jsonify({"success": True, **result}), 200
