from .router import analysis_router, health_check

__all__ = ["analysis_router", "health_check"]
