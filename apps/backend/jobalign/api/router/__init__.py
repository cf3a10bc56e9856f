from .analysis import analysis_router
from .health import health_check

__all__ = ["analysis_router", "health_check"]
