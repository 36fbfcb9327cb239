"""
Prediction and history orchestration.
"""

import logging
import time
from typing import List

from fastapi.concurrency import run_in_threadpool

from ..exceptions import (
    PayloadTooLargeError,
    InvalidImageError,
    PredictionError,
    HistoryReadError,
)
from ..libs.image_utils import is_grayscale, preprocess_image
from ..libs.storage import PredictionStore
from ..schemas.prediction import PredictionLabel, PredictionRecord
from ..schemas.response import HistoryItem
from .model_loader import CancerClassifier

logger = logging.getLogger(__name__)


class PredictionService:
    """
    Validates uploads, runs the shared classifier and persists the outcome.

    Args:
        classifier: Shared read-only classifier
        store: Document store for prediction records
        max_upload_bytes: Uploads larger than this are rejected with 413
        image_size: Square edge the model expects
        threshold: Scores strictly above this are labelled "Cancer"
    """

    def __init__(
        self,
        classifier: CancerClassifier,
        store: PredictionStore,
        max_upload_bytes: int = 1_000_000,
        image_size: int = 224,
        threshold: float = 0.5,
    ):
        self.classifier = classifier
        self.store = store
        self.max_upload_bytes = max_upload_bytes
        self.image_size = image_size
        self.threshold = threshold

    def validate_upload(self, image_bytes: bytes) -> None:
        """
        Preconditions checked before any processing, first failure wins.

        Raises:
            PayloadTooLargeError: Upload exceeds ``max_upload_bytes``
            InvalidImageError: Upload is grayscale or not an image
        """
        if len(image_bytes) > self.max_upload_bytes:
            raise PayloadTooLargeError(self.max_upload_bytes)

        try:
            grayscale = is_grayscale(image_bytes)
        except ValueError as e:
            raise InvalidImageError(str(e)) from e

        if grayscale:
            raise InvalidImageError("grayscale image")

    def score(self, image_bytes: bytes) -> float:
        """Preprocess and run the classifier. Blocking."""
        batch = preprocess_image(image_bytes, size=self.image_size)
        return self.classifier.predict_score(batch)

    async def predict(self, image_bytes: bytes) -> PredictionRecord:
        """
        Classify an uploaded image and store the result.

        Raises:
            PayloadTooLargeError, InvalidImageError: On failed preconditions
            PredictionError: On any decode, inference or persistence failure
        """
        try:
            self.validate_upload(image_bytes)
        except InvalidImageError as e:
            logger.warning(f"Rejected upload: {e.reason}")
            raise

        start = time.perf_counter()
        try:
            score = await run_in_threadpool(self.score, image_bytes)
            label = PredictionLabel.from_score(score, self.threshold)
            record = await self.store.create(PredictionRecord.create(label))
        except Exception as e:
            logger.exception(f"Prediction failed: {e}")
            raise PredictionError() from e

        elapsed = time.perf_counter() - start
        logger.info(f"Predicted {record.id}: score={score:.4f} result={record.result.value} ({elapsed:.3f}s)")
        return record

    async def list_histories(self) -> List[HistoryItem]:
        """
        All stored predictions projected into history items.

        Raises:
            HistoryReadError: If the store cannot be read
        """
        try:
            records = await self.store.list_all()
        except Exception as e:
            logger.exception(f"Failed to read prediction histories: {e}")
            raise HistoryReadError() from e

        return [HistoryItem.from_record(record) for record in records]
