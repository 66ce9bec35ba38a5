"""Tests for the storage-versus-generation decisions of the orchestrator."""

import json
from datetime import timedelta

import pytest

from newsroom.errors import (
    ConfigurationError,
    GatewayExhaustedError,
    InputValidationError,
    NotFoundError,
    ParseError,
)
from newsroom.models.article import CATEGORIES, PROVENANCE_AI_GENERATED, PROVENANCE_SEARCH_GENERATED, normalize_title
from newsroom.services.content_store import utcnow
from newsroom.services.model_gateway import ModelGateway
from newsroom.services.orchestrator import GenerationOrchestrator

from conftest import article_payload, fenced, quota_error, verdict_payload


def _store_article(store, title, published=True, category="Politics", points=None, **kwargs):
    return store.create_article(
        title=title,
        summary_points=points or ["Point one", "Point two"],
        category=category,
        source="Manual",
        published=published,
        **kwargs,
    )


def _store_topic(store, title, score=50, category="Politics", fetched_at=None):
    fetched_at = fetched_at or utcnow()
    return store.insert_topic(
        title=title,
        description=f"About {title}",
        category=category,
        trend_score=score,
        source="News Outlets",
        region="India",
        fetched_at=fetched_at,
        expires_at=fetched_at + timedelta(hours=24),
    )


class TestSatisfyQuery:
    def test_short_query_is_rejected_without_gateway_call(self, orchestrator, genai_client) -> None:
        with pytest.raises(InputValidationError):
            orchestrator.satisfy_query(" a ")
        assert genai_client.calls == []

    def test_enough_stored_matches_skip_generation(self, orchestrator, store, genai_client) -> None:
        for i in range(3):
            _store_article(store, f"Union budget analysis part {i}")
        _store_article(store, "Cricket league preview")

        result = orchestrator.satisfy_query("BUDGET")

        assert genai_client.calls == []
        assert result["source"] == "database"
        assert result["aiGenerated"] is False
        assert len(result["articles"]) == 3
        assert all(article["fromDatabase"] for article in result["articles"])

    def test_matches_on_body_category_and_tags(self, orchestrator, store, genai_client) -> None:
        _store_article(store, "Untitled one", full_content="Monsoon session coverage")
        _store_article(store, "Untitled two", tags=["monsoon"])
        _store_article(store, "Untitled three", category="Monsoon")

        result = orchestrator.satisfy_query("monsoon")

        assert len(result["articles"]) == 3
        assert genai_client.calls == []

    def test_unpublished_articles_do_not_count(self, orchestrator, store, genai_client) -> None:
        for i in range(3):
            _store_article(store, f"Draft budget note {i}", published=False)
        genai_client.queue(fenced([article_payload(title="Budget explained")]))

        result = orchestrator.satisfy_query("budget")

        assert len(genai_client.calls) == 1
        assert [a["title"] for a in result["articles"]] == ["Budget explained"]

    def test_underfilled_query_generates_and_persists_one_article(self, orchestrator, store, genai_client) -> None:
        _store_article(store, "Semiconductor policy update")
        genai_client.queue(fenced([
            article_payload(title="India's chip fabs reach milestone", category=" technology "),
            article_payload(title="A second article the prompt did not ask for"),
        ]))

        result = orchestrator.satisfy_query("semiconductor")

        assert len(genai_client.calls) == 1
        assert result["source"] == "mixed"
        assert result["aiGenerated"] is True
        assert [a["fromDatabase"] for a in result["articles"]] == [True, False]

        generated = list(store.articles_collection.find({"source": PROVENANCE_SEARCH_GENERATED}))
        assert len(generated) == 1
        assert generated[0]["title"] == "India's chip fabs reach milestone"
        assert generated[0]["category"] == "Technology"
        assert generated[0]["published"] is True

    def test_unknown_generated_category_falls_back_to_known_one(self, orchestrator, store, genai_client) -> None:
        genai_client.queue(json.dumps([article_payload(category="Astrology")]))

        orchestrator.satisfy_query("stars")

        stored = store.articles_collection.find_one({"source": PROVENANCE_SEARCH_GENERATED})
        assert stored["category"] in CATEGORIES

    def test_exhausted_gateway_degrades_to_storage_results(self, orchestrator, store, genai_client) -> None:
        _store_article(store, "Election schedule announced")
        genai_client.queue(*[quota_error() for _ in range(4)])

        result = orchestrator.satisfy_query("election")

        assert len(genai_client.calls) == 4
        assert result["degraded"] is True
        assert result["aiGenerated"] is False
        assert [a["title"] for a in result["articles"]] == ["Election schedule announced"]
        assert store.count_articles() == 1

    def test_unparseable_output_degrades_to_storage_results(self, orchestrator, store, genai_client) -> None:
        genai_client.queue("I cannot write about that.")

        result = orchestrator.satisfy_query("election")

        assert result["degraded"] is True
        assert result["articles"] == []
        assert store.count_articles() == 0

    def test_article_without_summary_points_is_not_persisted(self, orchestrator, store, genai_client) -> None:
        genai_client.queue(fenced([{"title": "Headline only", "summaryPoints": []}]))

        result = orchestrator.satisfy_query("headline")

        assert result["degraded"] is True
        assert store.count_articles() == 0

    def test_missing_credential_returns_storage_results(self, store) -> None:
        gateway = ModelGateway(None, {"search": {"models": ["m"]}})
        orchestrator = GenerationOrchestrator(store, gateway)
        _store_article(store, "Flood relief update")

        result = orchestrator.satisfy_query("flood")

        assert result["source"] == "database"
        assert "unavailable" in result["message"]
        assert len(result["articles"]) == 1


class TestRefillFrontPage:
    def _three_articles(self):
        return fenced([
            article_payload(title="Monsoon arrives early over Kerala coast", category="Environment"),
            article_payload(title="Startup funding rebounds in second quarter", category="Business"),
            article_payload(title="National team named for the Asia Cup", category="Sports"),
        ])

    def _seed_topics(self, store):
        _store_topic(store, "Monsoon onset", score=90, category="Environment")
        _store_topic(store, "Startup funding", score=80, category="Business")
        _store_topic(store, "Asia Cup squad", score=70, category="Sports")

    def test_generates_one_article_per_topic(self, orchestrator, store, genai_client) -> None:
        self._seed_topics(store)
        genai_client.queue(self._three_articles())

        result = orchestrator.refill_front_page()

        assert result["generated"] == 3
        assert len(result["articles"]) == 3
        assert store.articles_collection.count_documents({"source": PROVENANCE_AI_GENERATED, "published": True}) == 3

    def test_second_run_within_window_generates_nothing(self, orchestrator, store, genai_client) -> None:
        self._seed_topics(store)
        genai_client.queue(self._three_articles())

        orchestrator.refill_front_page()
        second = orchestrator.refill_front_page()

        assert second["generated"] == 0
        assert len(genai_client.calls) == 1
        assert store.count_articles() == 3

    def test_topics_matching_recent_article_titles_are_skipped(self, orchestrator, store, genai_client) -> None:
        _store_topic(store, "Monsoon onset", score=90)
        _store_topic(store, "Startup funding", score=80)
        _store_article(store, "  monsoon ONSET ")
        genai_client.queue(fenced([article_payload(title="Startup funding rebounds")]))

        orchestrator.refill_front_page()

        prompt = genai_client.calls[0]["contents"]
        assert "Startup funding" in prompt
        assert "Monsoon onset" not in prompt

    def test_old_articles_do_not_block_topics(self, orchestrator, store, genai_client) -> None:
        _store_topic(store, "Monsoon onset", score=90)
        old = _store_article(store, "Monsoon onset")
        store.articles_collection.update_one(
            {"_id": old["_id"]}, {"$set": {"created_at": utcnow() - timedelta(hours=13)}}
        )
        genai_client.queue(fenced([article_payload(title="Monsoon onset brings relief")]))

        result = orchestrator.refill_front_page()

        assert result["generated"] == 1

    def test_batch_is_capped_to_top_five_topics(self, orchestrator, store, genai_client) -> None:
        for i in range(7):
            _store_topic(store, f"Topic number {i}", score=10 * (i + 1))
        genai_client.queue(fenced([article_payload(title=f"Headline {i}") for i in range(5)]))

        orchestrator.refill_front_page()

        prompt = genai_client.calls[0]["contents"]
        assert "5. Topic:" in prompt
        assert "6. Topic:" not in prompt
        assert "Topic number 6" in prompt
        assert "Topic number 0" not in prompt
        assert "Topic number 1" not in prompt

    def test_malformed_elements_are_skipped(self, orchestrator, store, genai_client) -> None:
        self._seed_topics(store)
        genai_client.queue(fenced([
            article_payload(title="Monsoon arrives early"),
            {"title": "No summary points"},
            article_payload(title="Asia Cup squad named"),
        ]))

        result = orchestrator.refill_front_page()

        assert result["generated"] == 2
        assert store.count_articles() == 2

    def test_refreshes_trending_topics_when_none_stored(self, orchestrator, store, genai_client) -> None:
        genai_client.queue(
            json.dumps([{"title": "Monsoon onset", "category": "Environment", "trendScore": 88}]),
            fenced([article_payload(title="Monsoon arrives early over Kerala")]),
        )

        result = orchestrator.refill_front_page()

        assert len(genai_client.calls) == 2
        assert store.count_topics() == 1
        assert result["generated"] == 1

    def test_exhausted_gateway_raises_and_persists_nothing(self, orchestrator, store, genai_client) -> None:
        self._seed_topics(store)
        genai_client.queue(*[quota_error() for _ in range(4)])

        with pytest.raises(GatewayExhaustedError):
            orchestrator.refill_front_page()
        assert store.count_articles() == 0

    def test_unparseable_output_raises_parse_error(self, orchestrator, store, genai_client) -> None:
        self._seed_topics(store)
        genai_client.queue("no json here")

        with pytest.raises(ParseError):
            orchestrator.refill_front_page()

    def test_missing_credential_is_a_configuration_error(self, store) -> None:
        orchestrator = GenerationOrchestrator(store, ModelGateway(None, {}))
        with pytest.raises(ConfigurationError):
            orchestrator.refill_front_page()

    def test_generation_status(self, orchestrator, store) -> None:
        _store_topic(store, "Monsoon onset")
        _store_article(store, "Fresh article")

        status = orchestrator.generation_status()

        assert status == {
            "recentArticles": 1,
            "totalArticles": 1,
            "trendingTopics": 1,
            "needsGeneration": True,
        }


class TestRefreshTrendingTopics:
    def test_duplicate_titles_are_not_inserted(self, orchestrator, store, genai_client) -> None:
        _store_topic(store, "Union Budget 2026")
        genai_client.queue(json.dumps([
            {"title": "  union budget 2026 ", "category": "Business", "trendScore": 95},
            {"title": "Chandrayaan follow-up mission", "category": "Science", "trendScore": 70},
            {"title": "CHANDRAYAAN follow-up mission", "category": "Science", "trendScore": 60},
        ]))

        added = orchestrator.refresh_trending_topics()

        assert added == 1
        titles = [normalize_title(t["title"]) for t in store.list_topics()]
        assert titles.count("union budget 2026") == 1
        assert titles.count("chandrayaan follow-up mission") == 1

    def test_rerun_is_idempotent_in_effect(self, orchestrator, store, genai_client) -> None:
        response = json.dumps([{"title": "Heatwave alert", "category": "Health"}])
        genai_client.queue(response, response)

        assert orchestrator.refresh_trending_topics() == 1
        assert orchestrator.refresh_trending_topics() == 0
        assert store.count_topics() == 1

    def test_topics_older_than_retention_are_purged(self, orchestrator, store, genai_client) -> None:
        _store_topic(store, "Stale story", fetched_at=utcnow() - timedelta(hours=25))
        _store_topic(store, "Recent story", fetched_at=utcnow() - timedelta(hours=2))
        genai_client.queue(json.dumps([{"title": "Stale story", "category": "World"}]))

        added = orchestrator.refresh_trending_topics()

        assert added == 1
        titles = sorted(t["title"] for t in store.list_topics())
        assert titles == ["Recent story", "Stale story"]
        assert all(t["fetched_at"] > utcnow() - timedelta(hours=24) for t in store.list_topics())

    def test_inserted_topics_are_normalized(self, orchestrator, store, genai_client) -> None:
        genai_client.queue(fenced([
            {"title": "Metro expansion", "category": "unknown", "trendScore": 150, "description": "Lines"},
        ]))

        orchestrator.refresh_trending_topics()

        topic = store.list_topics()[0]
        assert topic["category"] == "Politics"
        assert topic["trend_score"] == 100
        assert topic["region"] == "India"
        assert topic["source"] == "AI Generated"
        assert topic["expires_at"] - topic["fetched_at"] == timedelta(hours=24)

    def test_failed_refresh_keeps_existing_topics(self, orchestrator, store, genai_client) -> None:
        _store_topic(store, "Stale story", fetched_at=utcnow() - timedelta(hours=30))
        genai_client.queue(*[quota_error() for _ in range(4)])

        with pytest.raises(GatewayExhaustedError):
            orchestrator.refresh_trending_topics()
        assert store.count_topics() == 1


class TestFactCheck:
    def test_second_call_is_served_from_cache(self, orchestrator, store, genai_client) -> None:
        article = _store_article(store, "Budget raises defence spending")
        genai_client.queue(fenced(verdict_payload()))

        first = orchestrator.fact_check(str(article["_id"]))
        second = orchestrator.fact_check(str(article["_id"]))

        assert len(genai_client.calls) == 1
        assert first["cached"] is False
        assert second["cached"] is True
        assert second["factCheck"] == first["factCheck"]
        assert first["factCheck"]["overallVerdict"] == "MOSTLY TRUE"
        assert store.get_article(article["_id"])["fact_checked_at"] is not None

    def test_fresh_and_cached_results_have_the_same_shape(self, orchestrator, store, genai_client) -> None:
        article = _store_article(store, "Budget raises defence spending")
        genai_client.queue(json.dumps(verdict_payload()))

        first = orchestrator.fact_check(str(article["_id"]))
        second = orchestrator.fact_check(str(article["_id"]))

        assert set(first) == set(second)
        assert first["checkedAt"] is not None
        assert first["checkedAt"] == second["checkedAt"]

    def test_prompt_is_bounded_to_four_summary_points(self, orchestrator, store, genai_client) -> None:
        points = ["Point alpha", "Point bravo", "Point charlie", "Point delta", "Point echo", "Point foxtrot"]
        article = _store_article(store, "Long article", points=points)
        genai_client.queue(json.dumps(verdict_payload()))

        orchestrator.fact_check(str(article["_id"]))

        prompt = genai_client.calls[0]["contents"]
        assert "Long article" in prompt
        assert "Point delta" in prompt
        assert "Point echo" not in prompt

    def test_uses_fact_check_profile(self, orchestrator, store, genai_client) -> None:
        article = _store_article(store, "Any article")
        genai_client.queue(json.dumps(verdict_payload()))

        orchestrator.fact_check(str(article["_id"]))

        assert genai_client.calls[0]["config"].temperature == 0.3

    def test_missing_id_is_rejected(self, orchestrator) -> None:
        with pytest.raises(InputValidationError):
            orchestrator.fact_check(None)

    @pytest.mark.parametrize("article_id", ["64b7f0c2a1b2c3d4e5f60718", "not-an-object-id"])
    def test_unknown_article_is_not_found(self, orchestrator, genai_client, article_id) -> None:
        with pytest.raises(NotFoundError):
            orchestrator.fact_check(article_id)
        assert genai_client.calls == []

    def test_exhausted_gateway_caches_nothing(self, orchestrator, store, genai_client) -> None:
        article = _store_article(store, "Budget raises defence spending")
        genai_client.queue(*[quota_error() for _ in range(4)])

        with pytest.raises(GatewayExhaustedError):
            orchestrator.fact_check(str(article["_id"]))
        assert store.get_article(article["_id"])["fact_check_cache"] is None

    def test_malformed_verdict_is_a_parse_error(self, orchestrator, store, genai_client) -> None:
        article = _store_article(store, "Budget raises defence spending")
        genai_client.queue(json.dumps({"overallVerdict": "PROBABLY", "truthPercentage": 50}))

        with pytest.raises(ParseError) as excinfo:
            orchestrator.fact_check(str(article["_id"]))
        assert excinfo.value.stage == "validate"
        assert store.get_article(article["_id"])["fact_check_cache"] is None
