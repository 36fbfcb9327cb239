"""
Custom exceptions for the prediction server.

Every public failure is rendered as the fail envelope
``{"status": "fail", "message": ...}``. Subclasses keep the internal
category distinct while the public message stays generic per route.
"""

from typing import Any, Dict

PREDICTION_FAILED_MESSAGE = "Terjadi kesalahan dalam melakukan prediksi"
HISTORY_FAILED_MESSAGE = "Terjadi kesalahan dalam mengambil riwayat prediksi"


class PredictionServiceError(Exception):
    """Base exception for prediction server errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "fail", "message": self.message}


class PayloadTooLargeError(PredictionServiceError):
    """Raised when the uploaded image exceeds the size limit."""

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        super().__init__(
            message=f"Payload content length greater than maximum allowed: {max_bytes}",
            status_code=413,
        )


class InvalidImageError(PredictionServiceError):
    """Raised when the upload is not a usable color image (e.g. grayscale)."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(message=PREDICTION_FAILED_MESSAGE, status_code=400)


class PredictionError(PredictionServiceError):
    """Raised when decoding, inference or persistence fails."""

    def __init__(self):
        super().__init__(message=PREDICTION_FAILED_MESSAGE, status_code=400)


class HistoryReadError(PredictionServiceError):
    """Raised when stored predictions cannot be read."""

    def __init__(self):
        super().__init__(message=HISTORY_FAILED_MESSAGE, status_code=500)


class ModelLoadError(RuntimeError):
    """Raised when the model artifact cannot be fetched or deserialized."""

    def __init__(self, model_url: str, reason: str):
        self.model_url = model_url
        self.reason = reason
        super().__init__(f"Failed to load model from {model_url}: {reason}")
