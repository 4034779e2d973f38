"""Sync engine: PR reconciliation, comment ingestion and team orchestration."""

from .comments import CommentIngestionPipeline
from .commit_manager import CommitManager
from .orchestrator import TeamSyncOrchestrator
from .progress import (
    ProgressState,
    ProgressTracker,
    ProgressUpdate,
    WorkerEventType,
    WorkerMessage,
)
from .reconciliation import PRReconciliationService, merge_search_results
from .results import (
    CommentIngestionResult,
    ItemError,
    MemberSyncResult,
    ReconciliationResult,
    TeamSyncResult,
    UserSyncResult,
)
from .service import SyncService
from .worker import CommentJob, CommentWorkerManager

__all__ = [
    # Services
    "CommentIngestionPipeline",
    "PRReconciliationService",
    "SyncService",
    "TeamSyncOrchestrator",
    "merge_search_results",
    # Worker
    "CommentJob",
    "CommentWorkerManager",
    # Support
    "CommitManager",
    "ProgressState",
    "ProgressTracker",
    "ProgressUpdate",
    "WorkerEventType",
    "WorkerMessage",
    # Results
    "CommentIngestionResult",
    "ItemError",
    "MemberSyncResult",
    "ReconciliationResult",
    "TeamSyncResult",
    "UserSyncResult",
]
