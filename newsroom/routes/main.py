from datetime import datetime, timezone
from flask import Blueprint, request, jsonify, current_app
import math

from ..errors import NewsroomError, ParseError, StorageError
from ..models.article import (
    DEFAULT_CATEGORY,
    PROVENANCE_MANUAL,
    PROVENANCE_YOUTUBE,
    clean_tags,
    normalize_category,
)
from ..services.content_store import ContentStore
from ..services.model_gateway import ModelGateway
from ..services.orchestrator import GenerationOrchestrator
from ..utils.auth import require_admin_key
from ..utils.serialization import article_to_json, category_to_json

# Initialize the blueprint
main_bp = Blueprint('main', __name__)

MAX_PAGE_SIZE = 200


def init_route_dependencies(app, database, genai_client=None):
    """Build the store, gateway and orchestrator once per app and attach them to it."""
    if database.db is None:
        app.logger.error("Database connection not initialized")
        raise RuntimeError("Database connection not initialized")

    store = ContentStore(database.db)
    gateway = ModelGateway(
        app.config.get('GOOGLE_API_KEY'),
        app.config.get('MODEL_PROFILES', {}),
        timeout_ms=app.config.get('GEMINI_TIMEOUT_MS', 60000),
        client=genai_client,
    )
    app.extensions['newsroom'] = {
        'database': database,
        'store': store,
        'gateway': gateway,
        'orchestrator': GenerationOrchestrator(store, gateway, app.config),
    }


def services():
    return current_app.extensions['newsroom']


def error_response(error, parse_message="Failed to generate content"):
    """Map a NewsroomError onto the JSON error body and status the routes answer with."""
    if isinstance(error, ParseError):
        return jsonify({"error": parse_message}), error.status_code
    if isinstance(error, StorageError):
        current_app.logger.error(f"Storage error: {error}")
    return jsonify({"error": error.message}), error.status_code


@main_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        services()['database'].ping()
        mongo_status = "connected"
    except Exception as e:
        mongo_status = f"disconnected: {e}"

    google_api_key_status = "present" if current_app.config.get('GOOGLE_API_KEY') else "missing"

    return jsonify({
        "status": "ok",
        "message": "Newsroom backend is healthy!",
        "dependencies": {
            "mongodb": mongo_status,
            "google_ai_key": google_api_key_status
        },
        "timestamp": datetime.now(timezone.utc).isoformat()
    }), 200


@main_bp.route('/articles', methods=['GET'])
def get_articles():
    """
    Paginated list of published articles, newest first.
    Query parameters: category, limit, page, q
    """
    page = max(request.args.get('page', 1, type=int) or 1, 1)
    limit = request.args.get('limit', 50, type=int) or 50
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    category = request.args.get('category', type=str)
    query = (request.args.get('q', '', type=str) or '').strip()

    try:
        articles, total = services()['store'].list_articles(page, limit, category=category, query=query)
    except NewsroomError as e:
        return jsonify({"error": "Failed to fetch articles"}), e.status_code

    return jsonify({
        "articles": [article_to_json(article) for article in articles],
        "total": total,
        "page": page,
        "totalPages": math.ceil(total / limit),
    }), 200


@main_bp.route('/articles/<article_id>', methods=['GET'])
def get_article_detail(article_id):
    """Single article with up to three related articles from its category."""
    store = services()['store']
    try:
        article = store.get_article(article_id)
        if article is None:
            return jsonify({"error": "Article not found"}), 404
        related = store.related_articles(article)
    except NewsroomError as e:
        return error_response(e)

    return jsonify({
        "article": article_to_json(article),
        "related": [article_to_json(item) for item in related],
    }), 200


@main_bp.route('/articles', methods=['POST'])
@require_admin_key
def create_article():
    """
    Manual article submission.
    Expects JSON body: {"title", "summaryPoints", "fullContent"?, "youtubeUrl"?, "category"?, "tags"?, "authorId"?}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request must be JSON"}), 400

    title = data.get('title')
    title = title.strip() if isinstance(title, str) else ''
    summary_points = data.get('summaryPoints')
    if isinstance(summary_points, str):
        summary_points = [summary_points]
    if isinstance(summary_points, list):
        summary_points = [p.strip() for p in summary_points if isinstance(p, str) and p.strip()]
    else:
        summary_points = None

    if not title or not summary_points:
        return jsonify({"error": "Title and summary points are required"}), 400

    tags = data.get('tags')
    if tags is not None and not isinstance(tags, (list, str)):
        return jsonify({"error": "Tags must be a list of strings"}), 400

    youtube_url = data.get('youtubeUrl') or None
    try:
        article = services()['store'].create_article(
            title=title,
            summary_points=summary_points,
            full_content=data.get('fullContent') or None,
            youtube_url=youtube_url,
            category=normalize_category(data.get('category') or DEFAULT_CATEGORY),
            tags=clean_tags(tags),
            source=PROVENANCE_YOUTUBE if youtube_url else PROVENANCE_MANUAL,
            author_id=data.get('authorId') or None,
            published=True,
        )
    except NewsroomError as e:
        return jsonify({"error": "Failed to create article"}), e.status_code

    return jsonify({"success": True, "article": article_to_json(article)}), 200


@main_bp.route('/articles', methods=['DELETE'])
@require_admin_key
def delete_article():
    article_id = (request.args.get('id', '', type=str) or '').strip()
    if not article_id:
        return jsonify({"error": "Article ID is required"}), 400

    try:
        deleted = services()['store'].delete_article(article_id)
    except NewsroomError as e:
        return jsonify({"error": "Failed to delete article"}), e.status_code

    if not deleted:
        return jsonify({"error": "Article not found"}), 404
    current_app.logger.info(f"Deleted article {article_id}")
    return jsonify({"success": True}), 200


@main_bp.route('/categories', methods=['GET'])
def get_categories():
    try:
        categories = services()['store'].list_categories()
    except NewsroomError as e:
        return error_response(e)
    return jsonify({"categories": [category_to_json(c) for c in categories]}), 200
