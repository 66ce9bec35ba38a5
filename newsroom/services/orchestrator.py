import logging
from datetime import timedelta

from pydantic import ValidationError

from ..errors import (
    ConfigurationError,
    GatewayExhaustedError,
    InputValidationError,
    NotFoundError,
    ParseError,
    StorageError,
)
from ..models.article import (
    PROVENANCE_AI_GENERATED,
    PROVENANCE_SEARCH_GENERATED,
    GeneratedArticle,
    normalize_title,
)
from ..models.fact_check import FactCheckResult
from ..models.trending import GeneratedTopic
from ..utils.json_payload import as_list, parse_model_json
from ..utils.serialization import article_to_json, as_document, as_string_list, iso
from .content_store import utcnow
from .prompts import fact_check_prompt, front_page_prompt, search_article_prompt, trending_topics_prompt

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


def _log_parse_failure(purpose, error):
    logger.error(
        f"{purpose}: could not parse model output at stage '{error.stage}': {error.message}. "
        f"Raw text: {error.raw_text[:2000]!r}"
    )


class GenerationOrchestrator:
    """
    Decides, per request, whether stored content is enough or whether the
    model gateway has to be called, and persists what the gateway produces.
    """

    def __init__(self, store, gateway, settings=None):
        settings = settings or {}
        self.store = store
        self.gateway = gateway
        self.region = settings.get('TRENDING_REGION', 'India')
        self.satisfaction_threshold = settings.get('SEARCH_SATISFACTION_THRESHOLD', 3)
        self.search_limit = settings.get('SEARCH_STORAGE_LIMIT', 10)
        self.recent_window = timedelta(hours=settings.get('RECENT_ARTICLE_HOURS', 12))
        self.candidate_topics = settings.get('FRONT_PAGE_CANDIDATE_TOPICS', 10)
        self.batch_size = settings.get('FRONT_PAGE_BATCH_SIZE', 5)
        self.trending_retention = timedelta(hours=settings.get('TRENDING_RETENTION_HOURS', 24))
        self.fact_check_points = settings.get('FACT_CHECK_SUMMARY_POINTS', 4)

    def _require_gateway(self, message="AI API key not configured"):
        if not self.gateway.configured:
            raise ConfigurationError(message)

    # Search

    def satisfy_query(self, query):
        """
        Serve a search from storage when it has enough matches, otherwise
        generate one article on the topic. Generation failures degrade to the
        storage results.
        """
        query = (query or '').strip()
        if len(query) < MIN_QUERY_LENGTH:
            raise InputValidationError(f"Search query must be at least {MIN_QUERY_LENGTH} characters")

        stored = [
            article_to_json(article, from_database=True)
            for article in self.store.search_published(query, limit=self.search_limit)
        ]

        if len(stored) >= self.satisfaction_threshold:
            logger.info(f"Search '{query}' satisfied from storage with {len(stored)} articles")
            return {"query": query, "articles": stored, "source": "database", "aiGenerated": False}

        if not self.gateway.configured:
            return self._storage_only(query, stored, "Limited results found. AI generation unavailable.")

        try:
            text = self.gateway.generate(search_article_prompt(query, self.region), 'search')
        except GatewayExhaustedError:
            return self._storage_only(
                query, stored, "AI quota exceeded. Showing database results. Please wait a moment and try again."
            )

        try:
            generated = self._parse_search_article(text)
        except ParseError as e:
            _log_parse_failure('search', e)
            return self._storage_only(query, stored, "Could not generate a new article. Showing database results.")

        try:
            document = self.store.create_article(
                title=generated.title,
                summary_points=generated.summary_points,
                full_content=generated.full_content,
                category=generated.category,
                tags=generated.tags,
                source=PROVENANCE_SEARCH_GENERATED,
                published=True,
            )
        except StorageError as e:
            logger.error(f"Search '{query}': failed to save generated article: {e}")
            return self._storage_only(query, stored, "Could not save the generated article. Showing database results.")

        articles = stored + [article_to_json(document, from_database=False)]
        return {
            "query": query,
            "articles": articles,
            "source": "mixed",
            "aiGenerated": True,
            "message": f"Found {len(stored)} existing + generated 1 new articles",
        }

    def _storage_only(self, query, stored, message):
        logger.warning(f"Search '{query}' degraded to storage results: {message}")
        return {
            "query": query,
            "articles": stored,
            "source": "database",
            "aiGenerated": False,
            "degraded": True,
            "message": message,
        }

    def _parse_search_article(self, text):
        items = as_list(parse_model_json(text))
        if not items:
            raise ParseError("Model returned no article", stage="validate", raw_text=text)
        try:
            return GeneratedArticle.model_validate(items[0])
        except ValidationError as e:
            raise ParseError(f"Generated article is malformed: {e}", stage="validate", raw_text=text)

    # Front page

    def refill_front_page(self):
        """Generate articles for the top trending topics not covered recently."""
        self._require_gateway("Gemini API key not configured")

        topics = self.store.list_topics(limit=self.candidate_topics)
        if not topics:
            logger.info("No trending topics stored, refreshing before generation")
            self.refresh_trending_topics()
            topics = self.store.list_topics(limit=self.candidate_topics)

        if not topics:
            return {"generated": 0, "articles": [], "message": "No trending topics to generate from"}

        recent = self.store.recent_titles(utcnow() - self.recent_window)
        pending = [topic for topic in topics if normalize_title(topic.get("title")) not in recent]
        if not pending:
            return {"generated": 0, "articles": [], "message": "All trending topics already have articles"}

        batch = pending[:self.batch_size]
        text = self.gateway.generate(front_page_prompt(batch, self.region), 'front_page')

        try:
            items = as_list(parse_model_json(text))
        except ParseError as e:
            _log_parse_failure('front_page', e)
            raise

        created = []
        valid = 0
        for index, item in enumerate(items):
            try:
                article = GeneratedArticle.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping malformed generated article #{index}: {e}")
                continue
            valid += 1

            if normalize_title(article.title) in recent:
                logger.info(f"Skipping duplicate generated article: {article.title}")
                continue

            topic = batch[index] if len(items) == len(batch) else None
            try:
                document = self.store.create_article(
                    title=article.title,
                    summary_points=article.summary_points,
                    full_content=article.full_content,
                    category=article.category,
                    tags=article.tags,
                    source=PROVENANCE_AI_GENERATED,
                    published=True,
                    topic_title=topic.get("title") if topic else None,
                )
            except StorageError as e:
                logger.error(f"Error saving generated article '{article.title}': {e}")
                continue

            recent.add(normalize_title(article.title))
            created.append(document)

        if items and not valid:
            error = ParseError("No generated article was well-formed", stage="validate", raw_text=text)
            _log_parse_failure('front_page', error)
            raise error

        logger.info(f"Generated {len(created)} articles from {len(batch)} trending topics")
        return {
            "generated": len(created),
            "articles": [
                {"id": str(doc["_id"]), "title": doc["title"], "category": doc["category"]}
                for doc in created
            ],
            "message": f"Generated {len(created)} articles from trending topics",
        }

    def generation_status(self):
        recent = self.store.count_articles(since=utcnow() - self.recent_window)
        total = self.store.count_articles()
        topics = self.store.count_topics()
        return {
            "recentArticles": recent,
            "totalArticles": total,
            "trendingTopics": topics,
            "needsGeneration": recent < 5 and topics > 0,
        }

    # Trending topics

    def refresh_trending_topics(self):
        """
        Ask the model for fresh trending topics and insert the ones whose
        titles are not stored yet. Returns the number inserted.
        """
        self._require_gateway()

        text = self.gateway.generate(trending_topics_prompt(self.region), 'trending')
        try:
            items = as_list(parse_model_json(text))
        except ParseError as e:
            _log_parse_failure('trending', e)
            raise

        now = utcnow()
        self.store.purge_topics(now - self.trending_retention)
        existing = self.store.topic_titles()

        added = 0
        for item in items:
            try:
                topic = GeneratedTopic.model_validate(item)
            except ValidationError as e:
                logger.debug(f"Skipping malformed trending topic {item!r}: {e}")
                continue

            key = normalize_title(topic.title)
            if key in existing:
                continue

            try:
                self.store.insert_topic(
                    title=topic.title,
                    description=topic.description,
                    category=topic.category,
                    trend_score=topic.trend_score,
                    source=topic.source,
                    region=self.region,
                    fetched_at=now,
                    expires_at=now + self.trending_retention,
                )
            except StorageError as e:
                logger.error(f"Error saving trending topic '{topic.title}': {e}")
                continue

            existing.add(key)
            added += 1

        logger.info(f"Trending refresh added {added} of {len(items)} topics")
        return added

    # Fact-check

    def fact_check(self, article_id):
        """
        Return the article's fact-check, computing and caching it on first use.
        A cached verdict is returned as-is and never recomputed.
        """
        if article_id is None or not str(article_id).strip():
            raise InputValidationError("Article ID is required")

        article = self.store.get_article(article_id)
        if article is None:
            raise NotFoundError("Article not found")

        cached = as_document(article.get("fact_check_cache"))
        if cached:
            return {
                "articleId": str(article["_id"]),
                "articleTitle": article.get("title"),
                "factCheck": cached,
                "cached": True,
                "checkedAt": iso(article.get("fact_checked_at")),
            }

        self._require_gateway()

        points = as_string_list(article.get("summary_points"))[:self.fact_check_points]
        text = self.gateway.generate(fact_check_prompt(article, points), 'fact_check')

        try:
            result = FactCheckResult.model_validate(parse_model_json(text))
        except ValidationError as e:
            error = ParseError(f"Fact-check verdict is malformed: {e}", stage="validate", raw_text=text)
            _log_parse_failure('fact_check', error)
            raise error
        except ParseError as e:
            _log_parse_failure('fact_check', e)
            raise

        fact_check = result.model_dump(by_alias=True)
        checked_at = self.store.save_fact_check(article["_id"], fact_check)
        logger.info(f"Fact-checked article {article['_id']}: {result.overall_verdict}")

        return {
            "articleId": str(article["_id"]),
            "articleTitle": article.get("title"),
            "factCheck": fact_check,
            "cached": False,
            "checkedAt": iso(checked_at),
        }
