from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CATEGORIES = [
    "Politics", "Technology", "Business", "Sports", "Entertainment",
    "Science", "Education", "Health", "World", "Environment",
]
DEFAULT_CATEGORY = "Politics"

PROVENANCE_MANUAL = "Manual"
PROVENANCE_YOUTUBE = "YouTube"
PROVENANCE_AI_GENERATED = "AI Generated"
PROVENANCE_SEARCH_GENERATED = "Search Generated"

_CATEGORY_LOOKUP = {name.lower(): name for name in CATEGORIES}


def normalize_category(value):
    """Map a free-form category onto the fixed set, falling back to the default."""
    if not isinstance(value, str):
        return DEFAULT_CATEGORY
    return _CATEGORY_LOOKUP.get(value.strip().lower(), DEFAULT_CATEGORY)


def normalize_title(title):
    """Dedup key for titles: case and surrounding whitespace are ignored."""
    return (title or "").strip().lower()


def clean_tags(tags):
    if not tags:
        return []
    if isinstance(tags, str):
        tags = [tags]
    seen = set()
    cleaned = []
    for tag in tags:
        if not isinstance(tag, str) or not tag.strip():
            continue
        key = tag.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(tag.strip())
    return cleaned


class GeneratedArticle(BaseModel):
    """One article as returned by the model for search or front-page generation."""

    title: str
    category: str = DEFAULT_CATEGORY
    summary_points: List[str] = Field(min_length=1)
    full_content: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, value):
        return normalize_category(value)

    @field_validator("summary_points")
    @classmethod
    def _points_not_blank(cls, value):
        points = [point.strip() for point in value if point.strip()]
        if not points:
            raise ValueError("summaryPoints must contain at least one point")
        return points

    @field_validator("full_content", mode="before")
    @classmethod
    def _blank_content_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value):
        return clean_tags(value)
