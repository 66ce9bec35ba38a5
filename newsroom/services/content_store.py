import logging
import re
from datetime import datetime, timezone

from bson.errors import InvalidId
from bson.objectid import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from ..errors import StorageError
from ..models.article import normalize_title

logger = logging.getLogger(__name__)


def utcnow():
    """Naive UTC timestamp, the form BSON dates round-trip as."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_object_id(article_id):
    """Parse an article id; malformed ids yield None."""
    if isinstance(article_id, ObjectId):
        return article_id
    try:
        return ObjectId(str(article_id).strip())
    except (InvalidId, TypeError):
        return None


def _contains(text):
    return {"$regex": re.escape(text), "$options": "i"}


class ContentStore:
    """Articles, trending topics and categories persisted in MongoDB."""

    def __init__(self, db_client):
        self.db = db_client
        self.articles_collection = self.db.get_collection('articles')
        self.topics_collection = self.db.get_collection('trending_topics')
        self.categories_collection = self.db.get_collection('categories')

    # Articles

    def list_articles(self, page=1, limit=50, category=None, query=None):
        """
        Retrieves a page of published articles, newest first.
        Returns (articles, total).
        """
        skip = (page - 1) * limit
        criteria = {"published": True}
        if category and category != 'all':
            criteria["category"] = category
        if query:
            criteria["$or"] = [
                {"title": _contains(query)},
                {"category": _contains(query)},
            ]

        try:
            articles = list(
                self.articles_collection.find(criteria)
                .sort("created_at", DESCENDING)
                .skip(skip)
                .limit(limit)
            )
            total = self.articles_collection.count_documents(criteria)
            logger.info(f"Retrieved {len(articles)} articles (page {page}, limit {limit})")
            return articles, total
        except PyMongoError as e:
            logger.error(f"MongoDB error fetching articles: {e}")
            raise StorageError("Failed to fetch articles") from e

    def get_article(self, article_id):
        oid = to_object_id(article_id)
        if oid is None:
            logger.warning(f"Malformed article ID: {article_id}")
            return None
        try:
            article = self.articles_collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"MongoDB error fetching article by ID {article_id}: {e}")
            raise StorageError("Failed to fetch article") from e
        if article is None:
            logger.warning(f"Article with ID {article_id} not found.")
        return article

    def related_articles(self, article, limit=3):
        """Other published articles of the same category."""
        try:
            return list(
                self.articles_collection.find({
                    "category": article.get("category"),
                    "_id": {"$ne": article["_id"]},
                    "published": True,
                })
                .sort("created_at", DESCENDING)
                .limit(limit)
            )
        except PyMongoError as e:
            logger.error(f"MongoDB error fetching related articles for {article['_id']}: {e}")
            raise StorageError("Failed to fetch related articles") from e

    def search_published(self, query, limit=10):
        """Published articles whose title, body, category or tags contain ``query``."""
        pattern = _contains(query)
        criteria = {
            "published": True,
            "$or": [
                {"title": pattern},
                {"full_content": pattern},
                {"category": pattern},
                {"tags": pattern},
            ],
        }
        try:
            return list(
                self.articles_collection.find(criteria)
                .sort("created_at", DESCENDING)
                .limit(limit)
            )
        except PyMongoError as e:
            logger.error(f"MongoDB error searching articles with query '{query}': {e}")
            raise StorageError("Failed to search articles") from e

    def create_article(self, title, summary_points, category, source, full_content=None,
                       youtube_url=None, image_url=None, tags=None, author_id=None, published=True,
                       topic_title=None):
        document = {
            "title": title,
            "summary_points": list(summary_points),
            "full_content": full_content or None,
            "youtube_url": youtube_url or None,
            "image_url": image_url or None,
            "category": category,
            "tags": list(tags or []),
            "source": source,
            "published": published,
            "author_id": author_id or None,
            # Trending topic the article was generated from
            "topic_title": topic_title or None,
            "created_at": utcnow(),
            "fact_check_cache": None,
            "fact_checked_at": None,
        }
        try:
            result = self.articles_collection.insert_one(document)
        except PyMongoError as e:
            logger.error(f"MongoDB error creating article '{title}': {e}")
            raise StorageError("Failed to create article") from e
        document["_id"] = result.inserted_id
        logger.info(f"Created article {result.inserted_id} ({source}): {title}")
        return document

    def delete_article(self, article_id):
        """Returns True when a document was removed."""
        oid = to_object_id(article_id)
        if oid is None:
            return False
        try:
            result = self.articles_collection.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"MongoDB error deleting article {article_id}: {e}")
            raise StorageError("Failed to delete article") from e
        return result.deleted_count > 0

    def save_fact_check(self, article_id, fact_check):
        """Caches the verdict on the article; returns the check timestamp."""
        # BSON dates hold milliseconds
        now = utcnow()
        checked_at = now.replace(microsecond=now.microsecond // 1000 * 1000)
        try:
            self.articles_collection.update_one(
                {"_id": to_object_id(article_id)},
                {"$set": {"fact_check_cache": fact_check, "fact_checked_at": checked_at}}
            )
        except PyMongoError as e:
            logger.error(f"MongoDB error caching fact-check for article {article_id}: {e}")
            raise StorageError("Failed to save fact-check") from e
        return checked_at

    def recent_titles(self, since):
        """
        Normalized titles of articles created at or after ``since``, together
        with the trending topic titles they were generated from.
        """
        try:
            cursor = self.articles_collection.find({"created_at": {"$gte": since}}, {"title": 1, "topic_title": 1})
            titles = set()
            for doc in cursor:
                titles.add(normalize_title(doc.get("title")))
                if doc.get("topic_title"):
                    titles.add(normalize_title(doc["topic_title"]))
            return titles
        except PyMongoError as e:
            logger.error(f"MongoDB error fetching recent titles: {e}")
            raise StorageError("Failed to fetch recent titles") from e

    def count_articles(self, since=None):
        criteria = {}
        if since is not None:
            criteria["created_at"] = {"$gte": since}
        try:
            return self.articles_collection.count_documents(criteria)
        except PyMongoError as e:
            logger.error(f"MongoDB error counting articles: {e}")
            raise StorageError("Failed to count articles") from e

    # Trending topics

    def list_topics(self, category=None, limit=200):
        criteria = {}
        if category and category != 'all':
            criteria["category"] = category
        try:
            return list(self.topics_collection.find(criteria).sort("trend_score", DESCENDING).limit(limit))
        except PyMongoError as e:
            logger.error(f"MongoDB error fetching trending topics: {e}")
            raise StorageError("Failed to fetch trending topics") from e

    def count_topics(self):
        try:
            return self.topics_collection.count_documents({})
        except PyMongoError as e:
            logger.error(f"MongoDB error counting trending topics: {e}")
            raise StorageError("Failed to count trending topics") from e

    def topic_titles(self):
        try:
            return {normalize_title(doc.get("title")) for doc in self.topics_collection.find({}, {"title": 1})}
        except PyMongoError as e:
            logger.error(f"MongoDB error fetching trending topic titles: {e}")
            raise StorageError("Failed to fetch trending topic titles") from e

    def purge_topics(self, older_than):
        try:
            result = self.topics_collection.delete_many({"fetched_at": {"$lt": older_than}})
        except PyMongoError as e:
            logger.error(f"MongoDB error purging trending topics: {e}")
            raise StorageError("Failed to purge trending topics") from e
        if result.deleted_count:
            logger.info(f"Purged {result.deleted_count} trending topics fetched before {older_than.isoformat()}")
        return result.deleted_count

    def insert_topic(self, title, description, category, trend_score, source, region, fetched_at, expires_at):
        document = {
            "title": title,
            "description": description,
            "category": category,
            "trend_score": trend_score,
            "source": source,
            "region": region,
            "fetched_at": fetched_at,
            "expires_at": expires_at,
        }
        try:
            result = self.topics_collection.insert_one(document)
        except PyMongoError as e:
            logger.error(f"MongoDB error inserting trending topic '{title}': {e}")
            raise StorageError("Failed to insert trending topic") from e
        document["_id"] = result.inserted_id
        return document

    # Categories

    def list_categories(self):
        try:
            return list(self.categories_collection.find({}).sort("name", ASCENDING))
        except PyMongoError as e:
            logger.error(f"MongoDB error fetching categories: {e}")
            raise StorageError("Failed to fetch categories") from e
