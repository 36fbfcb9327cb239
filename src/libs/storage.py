"""
Document storage for prediction records.

Records are write-once: stores expose create and read operations only.
"""

import inspect
import logging
import threading
from typing import Dict, List, Optional

from ..schemas.prediction import PredictionRecord

logger = logging.getLogger(__name__)


class PredictionStore:
    """Interface shared by store backends."""

    async def create(self, record: PredictionRecord) -> PredictionRecord:
        raise NotImplementedError

    async def get(self, prediction_id: str) -> Optional[PredictionRecord]:
        raise NotImplementedError

    async def list_all(self) -> List[PredictionRecord]:
        raise NotImplementedError

    async def close(self):
        """Release backend connections. Called once on shutdown."""


class InMemoryPredictionStore(PredictionStore):
    """Thread-safe in-memory store. Contents are lost on restart."""

    def __init__(self):
        self._records: Dict[str, PredictionRecord] = {}
        self._lock = threading.RLock()

    async def create(self, record: PredictionRecord) -> PredictionRecord:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"Prediction already exists: {record.id}")
            self._records[record.id] = record
            return record

    async def get(self, prediction_id: str) -> Optional[PredictionRecord]:
        with self._lock:
            return self._records.get(prediction_id)

    async def list_all(self) -> List[PredictionRecord]:
        """All records in insertion order."""
        with self._lock:
            return list(self._records.values())

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def clear(self):
        with self._lock:
            self._records.clear()


class FirestorePredictionStore(PredictionStore):
    """
    Google Cloud Firestore backend.

    One document per prediction in ``collection``, keyed by the record ID.

    Args:
        client: ``google.cloud.firestore.AsyncClient``
        collection: Collection name
    """

    def __init__(self, client, collection: str = "predictions"):
        self._client = client
        self._collection = collection

    async def create(self, record: PredictionRecord) -> PredictionRecord:
        doc_ref = self._client.collection(self._collection).document(record.id)
        await doc_ref.set(record.to_document())
        logger.info(f"Stored prediction {record.id} in {self._collection}")
        return record

    async def get(self, prediction_id: str) -> Optional[PredictionRecord]:
        snapshot = await self._client.collection(self._collection).document(prediction_id).get()
        if not snapshot.exists:
            return None
        return self._to_record(snapshot)

    async def list_all(self) -> List[PredictionRecord]:
        records = []
        async for snapshot in self._client.collection(self._collection).stream():
            records.append(self._to_record(snapshot))
        return records

    async def close(self):
        # close() returns a coroutine on some client releases
        result = self._client.close()
        if inspect.isawaitable(result):
            await result
        logger.info("Closed Firestore client")

    @staticmethod
    def _to_record(snapshot) -> PredictionRecord:
        data = snapshot.to_dict() or {}
        data.setdefault("id", snapshot.id)
        return PredictionRecord.from_document(data)


def create_firestore_client(
    project: Optional[str] = None,
    database: Optional[str] = None,
    credentials_path: Optional[str] = None,
):
    """
    Build an async Firestore client.

    Uses the service account file when given, otherwise application default credentials.
    """
    from google.cloud import firestore

    credentials = None
    if credentials_path:
        from google.oauth2 import service_account

        credentials = service_account.Credentials.from_service_account_file(credentials_path)
        project = project or credentials.project_id

    kwargs = {"project": project, "credentials": credentials}
    if database:
        kwargs["database"] = database
    return firestore.AsyncClient(**kwargs)


def create_prediction_store(settings) -> PredictionStore:
    """Build the store selected by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        logger.warning("Using in-memory prediction store; records will not survive a restart")
        return InMemoryPredictionStore()

    client = create_firestore_client(
        project=settings.firestore_project,
        database=settings.firestore_database,
        credentials_path=settings.google_credentials_path,
    )
    logger.info(f"Using Firestore prediction store (collection={settings.firestore_collection})")
    return FirestorePredictionStore(client, collection=settings.firestore_collection)
