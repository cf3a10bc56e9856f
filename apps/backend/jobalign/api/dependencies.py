from fastapi import Request

from ..services import AnalysisService, ShareStore


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def get_share_store(request: Request) -> ShareStore:
    return request.app.state.share_store
