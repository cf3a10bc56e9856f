from .resume_analysis import (
    AnalysisError,
    AnalysisOutcome,
    AnalysisRequest,
    AnalysisResult,
    AnalysisStatus,
    ScoreBreakdown,
    SharedRecord,
    SharedRecordCreated,
)

__all__ = [
    "AnalysisError",
    "AnalysisOutcome",
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisStatus",
    "ScoreBreakdown",
    "SharedRecord",
    "SharedRecordCreated",
]
