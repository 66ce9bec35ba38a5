from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Verdict = Literal[
    "TRUE", "MOSTLY TRUE", "PARTIALLY TRUE", "MISLEADING", "MOSTLY FALSE", "FALSE", "UNVERIFIED",
]
Reliability = Literal["High", "Medium", "Low"]


def _upper_verdict(value):
    if isinstance(value, str):
        return " ".join(value.replace("_", " ").split()).upper()
    return value


class ClaimVerification(BaseModel):
    claim: str
    verdict: Verdict
    explanation: str = ""
    sources: List[str] = Field(default_factory=list)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("verdict", mode="before")
    @classmethod
    def _verdict(cls, value):
        return _upper_verdict(value)


class FactCheckSource(BaseModel):
    name: str
    type: str = ""
    reliability: Reliability = "Medium"
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("reliability", mode="before")
    @classmethod
    def _reliability(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value


class FactCheckResult(BaseModel):
    """Verdict object cached on an article after its first fact-check."""

    overall_verdict: Verdict
    truth_percentage: int = Field(ge=0, le=100)
    overall_summary: str = ""
    claim_verifications: List[ClaimVerification] = Field(default_factory=list)
    sources: List[FactCheckSource] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)
    context: str = ""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("overall_verdict", mode="before")
    @classmethod
    def _verdict(cls, value):
        return _upper_verdict(value)

    @field_validator("truth_percentage", mode="before")
    @classmethod
    def _percentage(cls, value):
        if isinstance(value, str):
            value = value.strip().rstrip("%")
        try:
            return int(round(float(value)))
        except (TypeError, ValueError):
            return value
