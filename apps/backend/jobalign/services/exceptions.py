from typing import Optional


class SharedAnalysisNotFoundError(Exception):
    """
    Exception raised when a shared analysis is not found in the store.
    """

    def __init__(self, analysis_id: Optional[str] = None, message: Optional[str] = None):
        self.analysis_id = analysis_id
        if message is None:
            message = (
                f"Shared analysis with ID {analysis_id} not found."
                if analysis_id
                else "Shared analysis not found."
            )
        super().__init__(message)


class ShareStoreError(Exception):
    """
    Exception raised when the share store backend cannot read or write records.
    """

    def __init__(self, message: str = "Share store is unavailable.", path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message} (path: {path})"
        super().__init__(message)
