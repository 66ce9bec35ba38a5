import json
from datetime import datetime, timezone


def iso(value):
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def as_string_list(value):
    """
    Stored list fields come back as lists; rows written by the old store hold
    them as JSON-encoded text and are decoded here.
    """
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str)]
    return []


def as_document(value):
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


def article_to_json(article, from_database=None):
    """Wire representation of a stored article (camelCase, string id)."""
    data = {
        "id": str(article["_id"]),
        "title": article.get("title"),
        "summaryPoints": as_string_list(article.get("summary_points")),
        "fullContent": article.get("full_content"),
        "youtubeUrl": article.get("youtube_url"),
        "imageUrl": article.get("image_url"),
        "category": article.get("category"),
        "tags": as_string_list(article.get("tags")),
        "source": article.get("source"),
        "published": article.get("published", False),
        "authorId": article.get("author_id"),
        "createdAt": iso(article.get("created_at")),
        "factCheckCache": as_document(article.get("fact_check_cache")),
        "factCheckedAt": iso(article.get("fact_checked_at")),
    }
    if from_database is not None:
        data["fromDatabase"] = from_database
    return data


def topic_to_json(topic):
    return {
        "id": str(topic["_id"]),
        "title": topic.get("title"),
        "description": topic.get("description"),
        "category": topic.get("category"),
        "trendScore": topic.get("trend_score"),
        "source": topic.get("source"),
        "region": topic.get("region"),
        "fetchedAt": iso(topic.get("fetched_at")),
        "expiresAt": iso(topic.get("expires_at")),
    }


def category_to_json(category):
    return {
        "id": str(category["_id"]),
        "name": category.get("name"),
        "slug": category.get("slug"),
        "description": category.get("description"),
        "icon": category.get("icon"),
    }
