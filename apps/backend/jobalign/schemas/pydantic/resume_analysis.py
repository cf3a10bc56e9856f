from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DEFAULT_SUMMARY = "Technical analysis completed."
DEFAULT_FEEDBACK = "No specific feedback provided."
DEFAULT_SEARCH_QUERY = "Software Engineer"
NO_GAPS_SENTINEL = "No specific gaps identified"

MAX_SUMMARY_LENGTH = 400


class AnalysisStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    REJECTED = "rejected"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class AnalysisRequest(_CamelModel):
    resume_text: str
    job_description: str


class ScoreBreakdown(_CamelModel):
    strengths: List[str] = Field(default_factory=list)
    partial: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)


class AnalysisResult(_CamelModel):
    """
    Normalized analysis returned to the UI.

    Serialize with ``model_dump(by_alias=True)`` to get the wire field names
    (``matchScore``, ``missingKeywords``, ...).
    """

    match_score: int = Field(ge=0, le=100)
    missing_keywords: List[str] = Field(
        default_factory=lambda: [NO_GAPS_SENTINEL], min_length=1
    )
    summary: str = Field(default=DEFAULT_SUMMARY, max_length=MAX_SUMMARY_LENGTH)
    feedback: str = DEFAULT_FEEDBACK
    search_query: str = DEFAULT_SEARCH_QUERY
    score_breakdown: ScoreBreakdown = Field(default_factory=ScoreBreakdown)
    resume_tips: List[str] = Field(default_factory=list)
    status: AnalysisStatus = AnalysisStatus.OK


class SharedRecord(_CamelModel):
    id: str
    result: AnalysisResult
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SharedRecordCreated(_CamelModel):
    id: str


class AnalysisError(_CamelModel):
    kind: str  # "validation" | "provider"
    message: str


class AnalysisOutcome(_CamelModel):
    """Result of one orchestrated analysis.

    ``result`` is always renderable; ``error`` is only set for rejected and
    degraded outcomes.
    """

    status: AnalysisStatus
    result: AnalysisResult
    error: Optional[AnalysisError] = None

    @property
    def ok(self) -> bool:
        return self.status is AnalysisStatus.OK
