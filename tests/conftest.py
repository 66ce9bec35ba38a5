"""Shared fixtures: an in-memory MongoDB and a scripted stand-in for the Gemini client."""

import json
from types import SimpleNamespace

import mongomock
import pytest
from google.genai import errors

from config import TestingConfig
from newsroom import create_app
from newsroom.services.content_store import ContentStore
from newsroom.services.model_gateway import ModelGateway
from newsroom.services.orchestrator import GenerationOrchestrator

ADMIN_HEADERS = {"X-API-KEY": TestingConfig.ADMIN_API_KEY}


class StubGenAIClient:
    """
    Replays scripted outcomes for ``client.models.generate_content`` and
    records every call. An outcome is either response text or an exception.
    """

    def __init__(self):
        self.outcomes = []
        self.calls = []
        self.models = self

    def queue(self, *outcomes):
        self.outcomes.extend(outcomes)
        return self

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if not self.outcomes:
            raise AssertionError(f"Unexpected generate_content call for {model}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(text=outcome)


def quota_error():
    return errors.ClientError(
        429, {"error": {"code": 429, "message": "Resource has been exhausted", "status": "RESOURCE_EXHAUSTED"}}
    )


def article_payload(title="Generated headline about the topic", category="Technology", points=None, tags=None):
    return {
        "title": title,
        "category": category,
        "summaryPoints": points or ["First key fact", "Second key fact"],
        "fullContent": "## Background\nSome context.\n\n## Outlook\nWhat comes next.",
        "tags": tags or ["news", "india"],
    }


def fenced(payload):
    return f"Here you go:\n```json\n{json.dumps(payload)}\n```\n"


def verdict_payload(verdict="MOSTLY TRUE", percentage=80):
    return {
        "overallVerdict": verdict,
        "truthPercentage": percentage,
        "overallSummary": "The main claims hold up.",
        "claimVerifications": [
            {
                "claim": "First key fact",
                "verdict": "TRUE",
                "explanation": "Confirmed by official data.",
                "sources": ["PIB"],
            }
        ],
        "sources": [{"name": "PIB", "type": "Government Data", "reliability": "High"}],
        "redFlags": [],
        "context": "Budget figures are published annually.",
    }


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def db(mongo_client):
    return mongo_client[TestingConfig.MONGO_DB_NAME]


@pytest.fixture
def store(db):
    return ContentStore(db)


@pytest.fixture
def genai_client():
    return StubGenAIClient()


@pytest.fixture
def gateway(genai_client):
    return ModelGateway("test-key", TestingConfig.MODEL_PROFILES, client=genai_client)


@pytest.fixture
def orchestrator(store, gateway):
    return GenerationOrchestrator(store, gateway, {"TRENDING_REGION": "India"})


@pytest.fixture
def app(mongo_client, genai_client):
    return create_app(TestingConfig, mongo_client=mongo_client, genai_client=genai_client)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_store(app):
    return app.extensions["newsroom"]["store"]
