"""
Prediction record schema and label definitions.
"""

import uuid
from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict
from pydantic import BaseModel, Field


class PredictionLabel(str, Enum):
    """Binary classification outcome."""

    CANCER = "Cancer"
    NON_CANCER = "Non-cancer"

    @classmethod
    def from_score(cls, score: float, threshold: float = 0.5) -> "PredictionLabel":
        """Scores strictly above the threshold are positive."""
        return cls.CANCER if score > threshold else cls.NON_CANCER

    @property
    def suggestion(self) -> str:
        suggestions = {
            "Cancer": "Segera periksa ke dokter!",
            "Non-cancer": "Penyakit kanker tidak terdeteksi.",
        }
        return suggestions[self.value]


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PredictionRecord(BaseModel):
    """Persisted outcome of one classification request. Immutable once created."""

    id: str = Field(..., description="Unique prediction ID")
    result: PredictionLabel = Field(..., description="Classification label")
    suggestion: str = Field(..., description="Human-readable advice for the label")
    created_at: str = Field(..., alias="createdAt", description="Creation timestamp (ISO format)")

    class Config:
        frozen = True
        populate_by_name = True

    @classmethod
    def create(cls, label: PredictionLabel) -> "PredictionRecord":
        """Build a new record with a fresh ID and timestamp."""
        return cls(
            id=str(uuid.uuid4()),
            result=label,
            suggestion=label.suggestion,
            created_at=utc_now_iso(),
        )

    def to_document(self) -> Dict[str, Any]:
        """Field layout stored in the document database."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "PredictionRecord":
        return cls.model_validate(data)
