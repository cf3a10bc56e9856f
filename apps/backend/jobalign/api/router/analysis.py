import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from ..dependencies import get_analysis_service, get_share_store
from ...core import settings
from ...schemas.pydantic import AnalysisRequest, AnalysisResult, SharedRecord, SharedRecordCreated
from ...services import AnalysisService, ShareStore, SharedAnalysisNotFoundError, ShareStoreError

logger = logging.getLogger(__name__)

analysis_router = APIRouter()


@analysis_router.post("/analyze", summary="Analyze an uploaded resume against a job description", response_model=AnalysisResult)
async def analyze_upload(
    resume: UploadFile = File(...),
    job_desc: str = Form("", alias="jobDesc"),
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisResult:
    data = await resume.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Resume file exceeds {settings.MAX_UPLOAD_BYTES} bytes",
        )
    outcome = await service.analyze_document(data, job_desc, content_type=resume.content_type)
    return outcome.result


@analysis_router.post("/analyze/text", summary="Analyze resume text against a job description", response_model=AnalysisResult)
async def analyze_text(
    payload: AnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisResult:
    outcome = await service.run(payload.resume_text, payload.job_description)
    return outcome.result


@analysis_router.post(
    "/analysis",
    status_code=status.HTTP_201_CREATED,
    response_model=SharedRecordCreated,
    summary="Save an analysis result for sharing",
)
async def share_analysis(
    result: AnalysisResult,
    store: ShareStore = Depends(get_share_store),
) -> SharedRecordCreated:
    try:
        analysis_id = await store.save(result)
    except ShareStoreError as e:
        logger.error(f"Saving shared analysis failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return SharedRecordCreated(id=analysis_id)


@analysis_router.get(
    "/analysis/{analysis_id}",
    response_model=SharedRecord,
    summary="Fetch a shared analysis",
)
async def get_shared_analysis(
    analysis_id: str,
    store: ShareStore = Depends(get_share_store),
) -> SharedRecord:
    try:
        return await store.load_record(analysis_id)
    except SharedAnalysisNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ShareStoreError as e:
        logger.error(f"Loading shared analysis {analysis_id} failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
