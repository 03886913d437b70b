"""HTTP service mode for rescat."""

from .app import DownloadRecorder, LoggingDownloadRecorder, create_app, run_service

__all__ = ["DownloadRecorder", "LoggingDownloadRecorder", "create_app", "run_service"]
