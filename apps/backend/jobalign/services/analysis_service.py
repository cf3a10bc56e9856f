import asyncio
import logging
import time
from typing import Optional

from ..agent import AgentManager
from ..agent.exceptions import EmptyCompletionError, ProviderError, ProviderTimeoutError
from ..core import settings
from ..prompt import build_analysis_prompt
from ..schemas.pydantic.resume_analysis import (
    MAX_SUMMARY_LENGTH,
    AnalysisError,
    AnalysisOutcome,
    AnalysisResult,
    AnalysisStatus,
)
from .response_parser import parse_analysis_response
from .text_extractor import PdfTextExtractor

logger = logging.getLogger(__name__)

DEGRADED_MATCH_SCORE = 10
REJECTED_MATCH_SCORE = 0
PROVIDER_ERROR_SENTINEL = "AI service error"
INPUT_TOO_SHORT_SENTINEL = "Input too short"


def _fit_summary(text: str) -> str:
    if len(text) > MAX_SUMMARY_LENGTH:
        return text[: MAX_SUMMARY_LENGTH - 3] + "..."
    return text


class AnalysisService:
    """
    Runs one resume / job description analysis end to end.

    validating -> completing -> parsed on success; ``rejected`` when an input
    is too short (no provider call is made) and ``degraded`` when the provider
    fails. Every path returns an ``AnalysisOutcome`` whose result can be
    rendered as is.
    """

    def __init__(
        self,
        agent_manager: Optional[AgentManager] = None,
        text_extractor: Optional[PdfTextExtractor] = None,
        timeout: float = settings.LLM_TIMEOUT_SECONDS,
        min_resume_chars: int = settings.MIN_RESUME_CHARS,
        min_job_description_chars: int = settings.MIN_JOB_DESCRIPTION_CHARS,
        prompt_max_chars: int = settings.PROMPT_MAX_CHARS,
    ) -> None:
        self.agent_manager = agent_manager or AgentManager()
        self.text_extractor = text_extractor or PdfTextExtractor()
        self.timeout = timeout
        self.min_resume_chars = min_resume_chars
        self.min_job_description_chars = min_job_description_chars
        self.prompt_max_chars = prompt_max_chars

    def _validate(self, resume_text: str, job_description: str) -> Optional[str]:
        """Return a user-facing message when an input is too short, else None."""
        if len(job_description) < self.min_job_description_chars:
            return (
                f"Job description is too short to analyze "
                f"(minimum {self.min_job_description_chars} characters)."
            )
        if len(resume_text) < self.min_resume_chars:
            return (
                f"Resume text is too short or could not be extracted "
                f"(minimum {self.min_resume_chars} characters)."
            )
        return None

    @staticmethod
    def _rejected(message: str) -> AnalysisOutcome:
        result = AnalysisResult(
            match_score=REJECTED_MATCH_SCORE,
            missing_keywords=[INPUT_TOO_SHORT_SENTINEL],
            summary=_fit_summary(message),
            feedback=message,
            status=AnalysisStatus.REJECTED,
        )
        return AnalysisOutcome(
            status=AnalysisStatus.REJECTED,
            result=result,
            error=AnalysisError(kind="validation", message=message),
        )

    @staticmethod
    def _degraded(cause: str) -> AnalysisOutcome:
        result = AnalysisResult(
            match_score=DEGRADED_MATCH_SCORE,
            missing_keywords=[PROVIDER_ERROR_SENTINEL],
            summary=_fit_summary(f"Analysis failed: {cause}"),
            feedback=(
                "The AI service is currently busy or the API key is invalid. "
                f"Please try again. Cause: {cause}"
            ),
            status=AnalysisStatus.DEGRADED,
        )
        return AnalysisOutcome(
            status=AnalysisStatus.DEGRADED,
            result=result,
            error=AnalysisError(kind="provider", message=cause),
        )

    async def _complete(self, prompt: str) -> str:
        try:
            completion = await asyncio.wait_for(self.agent_manager.run(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(f"Provider did not answer within {self.timeout:g}s") from e
        except ProviderError:
            raise
        except Exception as e:
            # CancelledError is a BaseException and still propagates
            logger.exception(f"Unexpected provider failure: {e!r}")
            raise ProviderError(f"Unexpected provider failure: {e!r}") from e
        if not completion or not completion.strip():
            raise EmptyCompletionError("Provider returned an empty completion")
        return completion

    async def run(self, resume_text: str, job_description: str) -> AnalysisOutcome:
        started = time.perf_counter()
        resume_text = (resume_text or "").strip()
        job_description = (job_description or "").strip()
        logger.info(
            f"New analysis request: resume={len(resume_text)} chars, "
            f"job_description={len(job_description)} chars"
        )

        rejection = self._validate(resume_text, job_description)
        if rejection:
            logger.warning(f"Analysis rejected: {rejection}")
            return self._rejected(rejection)

        prompt = build_analysis_prompt(job_description, resume_text, max_chars=self.prompt_max_chars)
        try:
            completion = await self._complete(prompt)
        except ProviderError as e:
            logger.error(f"Analysis degraded, provider failed: {e}")
            return self._degraded(str(e))

        logger.debug(f"Raw completion: {completion[:300]}")
        result = parse_analysis_response(completion)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Analysis complete: score={result.match_score}%, "
            f"missing={len(result.missing_keywords)}, took {elapsed_ms:.0f}ms"
        )
        return AnalysisOutcome(status=AnalysisStatus.OK, result=result)

    async def analyze_document(
        self,
        data: bytes,
        job_description: str,
        content_type: Optional[str] = None,
    ) -> AnalysisOutcome:
        """Extract the resume text from an uploaded document, then analyze it."""
        resume_text = await self.text_extractor.extract(data, content_type)
        return await self.run(resume_text, job_description)
