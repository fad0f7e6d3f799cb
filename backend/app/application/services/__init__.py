from .reconciler_service import ReconcilerService, SubmissionOutcome
from .search_service import SearchService, SearchOutcome
from .log_text_service import LogTextService, LogTextResult
from .password_sync import (
    PasswordService,
    PasswordState,
    PasswordSyncWorker,
)

__all__ = [
    "ReconcilerService",
    "SubmissionOutcome",
    "SearchService",
    "SearchOutcome",
    "LogTextService",
    "LogTextResult",
    "PasswordService",
    "PasswordState",
    "PasswordSyncWorker",
]
