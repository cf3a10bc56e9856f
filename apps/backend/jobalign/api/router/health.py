from datetime import datetime, timezone
from importlib.util import find_spec

from fastapi import APIRouter

from ...core import settings

health_check = APIRouter()


@health_check.get("/health", summary="Service health and configuration check")
async def health():
    needs_key = settings.LLM_PROVIDER.lower() != "ollama"
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "llmProvider": settings.LLM_PROVIDER,
        "model": settings.LL_MODEL,
        "llmConfigured": bool(settings.LLM_API_KEY) or not needs_key,
        "pdfParserAvailable": find_spec("pypdf") is not None,
    }
