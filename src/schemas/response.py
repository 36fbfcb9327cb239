"""
Response schemas for the prediction API.
"""

from typing import List, Literal
from pydantic import BaseModel, Field

from .prediction import PredictionRecord


class PredictionResponse(BaseModel):
    """Response for POST /predict."""

    status: Literal["success"] = Field(default="success")
    message: str = Field(default="Model is predicted successfully")
    data: PredictionRecord = Field(..., description="The stored prediction")


class HistoryItem(BaseModel):
    """One stored prediction, keyed by its document ID."""

    id: str = Field(..., description="Document ID")
    history: PredictionRecord = Field(..., description="Stored prediction fields")

    @classmethod
    def from_record(cls, record: PredictionRecord) -> "HistoryItem":
        return cls(id=record.id, history=record)


class HistoriesResponse(BaseModel):
    """Response for GET /predict/histories."""

    status: Literal["success"] = Field(default="success")
    data: List[HistoryItem] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response format."""

    status: Literal["fail"] = Field(default="fail")
    message: str = Field(..., description="Error message")

    class Config:
        json_schema_extra = {
            "example": {"status": "fail", "message": "Terjadi kesalahan dalam melakukan prediksi"}
        }
