"""Manual merge use cases."""

from .get_latest_manual_merge import (
    GetLatestManualMergeRequest,
    GetLatestManualMergeUseCase,
)
from .list_manual_merges import (
    ListManualMergesRequest,
    ListManualMergesResponse,
    ListManualMergesUseCase,
)
from .resolve_manual_merge import ResolveManualMergeRequest, ResolveManualMergeUseCase
from .submit_manual_merge import SubmitManualMergeRequest, SubmitManualMergeUseCase

__all__ = [
    "GetLatestManualMergeRequest",
    "GetLatestManualMergeUseCase",
    "ListManualMergesRequest",
    "ListManualMergesResponse",
    "ListManualMergesUseCase",
    "ResolveManualMergeRequest",
    "ResolveManualMergeUseCase",
    "SubmitManualMergeRequest",
    "SubmitManualMergeUseCase",
]
