"""
Pydantic schemas for prediction records and API responses.
"""

from .prediction import PredictionLabel, PredictionRecord, utc_now_iso
from .response import (
    PredictionResponse,
    HistoryItem,
    HistoriesResponse,
    ErrorResponse,
)

__all__ = [
    # Records
    "PredictionLabel",
    "PredictionRecord",
    "utc_now_iso",
    # Response
    "PredictionResponse",
    "HistoryItem",
    "HistoriesResponse",
    "ErrorResponse",
]
