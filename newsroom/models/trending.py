from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .article import DEFAULT_CATEGORY, normalize_category

DEFAULT_TREND_SCORE = 50
DEFAULT_TOPIC_SOURCE = "AI Generated"


class GeneratedTopic(BaseModel):
    title: str
    description: str = ""
    category: str = DEFAULT_CATEGORY
    trend_score: int = DEFAULT_TREND_SCORE
    source: str = DEFAULT_TOPIC_SOURCE
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value):
        return value.strip() if isinstance(value, str) else ""

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, value):
        return normalize_category(value)

    @field_validator("trend_score", mode="before")
    @classmethod
    def _clamp_score(cls, value):
        try:
            score = int(round(float(value)))
        except (TypeError, ValueError):
            return DEFAULT_TREND_SCORE
        # A zero score means the model left it unset
        if score == 0:
            return DEFAULT_TREND_SCORE
        return max(0, min(score, 100))

    @field_validator("source", mode="before")
    @classmethod
    def _source(cls, value):
        if isinstance(value, str) and value.strip():
            return value.strip()
        return DEFAULT_TOPIC_SOURCE
