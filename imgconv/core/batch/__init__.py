"""Batch processing module for converting whole directories."""

from .models import BatchFailure, BatchItem, BatchItemStatus, BatchResult, BatchStatus

__all__ = [
    "BatchFailure",
    "BatchItem",
    "BatchItemStatus",
    "BatchResult",
    "BatchStatus",
]
