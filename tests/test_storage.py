"""
Tests for prediction stores.
"""

import pytest
from unittest.mock import patch

from src.config import Settings
from src.libs.storage import (
    InMemoryPredictionStore,
    FirestorePredictionStore,
    create_prediction_store,
)
from src.schemas.prediction import PredictionLabel, PredictionRecord


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, docs, doc_id):
        self._docs = docs
        self._id = doc_id

    async def set(self, data):
        self._docs[self._id] = dict(data)

    async def get(self):
        return FakeSnapshot(self._id, self._docs.get(self._id))


class FakeCollection:
    def __init__(self, docs):
        self._docs = docs

    def document(self, doc_id):
        return FakeDocument(self._docs, doc_id)

    async def stream(self):
        for doc_id, data in list(self._docs.items()):
            yield FakeSnapshot(doc_id, data)


class FakeFirestoreClient:
    """Minimal async Firestore client keeping documents in dicts."""

    def __init__(self):
        self.collections = {}
        self.closed = False

    def collection(self, name):
        return FakeCollection(self.collections.setdefault(name, {}))

    def close(self):
        self.closed = True


class FakeAsyncCloseClient(FakeFirestoreClient):
    async def close(self):
        self.closed = True


@pytest.fixture
def sample_record():
    return PredictionRecord.create(PredictionLabel.CANCER)


class TestInMemoryPredictionStore:
    """Tests for InMemoryPredictionStore."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, clean_store, sample_record):
        """create and get should work correctly."""
        await clean_store.create(sample_record)
        retrieved = await clean_store.get(sample_record.id)
        assert retrieved == sample_record

    @pytest.mark.asyncio
    async def test_get_nonexistent(self, clean_store):
        assert await clean_store.get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self, clean_store, sample_record):
        """Records are write-once."""
        await clean_store.create(sample_record)
        with pytest.raises(ValueError):
            await clean_store.create(sample_record)

    @pytest.mark.asyncio
    async def test_list_all_in_insertion_order(self, clean_store):
        records = [PredictionRecord.create(PredictionLabel.NON_CANCER) for _ in range(5)]
        for record in records:
            await clean_store.create(record)

        assert await clean_store.list_all() == records
        assert clean_store.count() == 5

    @pytest.mark.asyncio
    async def test_clear(self, clean_store, sample_record):
        await clean_store.create(sample_record)
        clean_store.clear()
        assert clean_store.count() == 0
        assert await clean_store.list_all() == []


class TestFirestorePredictionStore:
    """Tests for FirestorePredictionStore."""

    @pytest.fixture
    def client(self):
        return FakeFirestoreClient()

    @pytest.mark.asyncio
    async def test_create_writes_document_keyed_by_id(self, client, sample_record):
        """One document per prediction, keyed by its ID."""
        store = FirestorePredictionStore(client, collection="predictions")
        await store.create(sample_record)

        docs = client.collections["predictions"]
        assert list(docs.keys()) == [sample_record.id]
        assert docs[sample_record.id] == {
            "id": sample_record.id,
            "result": "Cancer",
            "suggestion": "Segera periksa ke dokter!",
            "createdAt": sample_record.created_at,
        }

    @pytest.mark.asyncio
    async def test_get(self, client, sample_record):
        store = FirestorePredictionStore(client)
        await store.create(sample_record)
        assert await store.get(sample_record.id) == sample_record
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_list_all(self, client):
        store = FirestorePredictionStore(client)
        records = [PredictionRecord.create(PredictionLabel.from_score(s)) for s in (0.9, 0.2, 0.7)]
        for record in records:
            await store.create(record)

        listed = await store.list_all()
        assert {r.id for r in listed} == {r.id for r in records}

    @pytest.mark.asyncio
    async def test_list_all_falls_back_to_document_id(self, client):
        """Documents without an id field use the document ID."""
        client.collections["predictions"] = {
            "doc-1": {
                "result": "Non-cancer",
                "suggestion": "Penyakit kanker tidak terdeteksi.",
                "createdAt": "2024-05-01T10:00:00.000Z",
            }
        }
        store = FirestorePredictionStore(client)
        listed = await store.list_all()
        assert len(listed) == 1
        assert listed[0].id == "doc-1"

    @pytest.mark.asyncio
    async def test_close_releases_client(self, client):
        await FirestorePredictionStore(client).close()
        assert client.closed is True

    @pytest.mark.asyncio
    async def test_close_awaits_async_client(self):
        """Clients whose close() is a coroutine are awaited."""
        client = FakeAsyncCloseClient()
        await FirestorePredictionStore(client).close()
        assert client.closed is True

    @pytest.mark.asyncio
    async def test_uses_configured_collection(self, client, sample_record):
        store = FirestorePredictionStore(client, collection="screenings")
        await store.create(sample_record)
        assert sample_record.id in client.collections["screenings"]
        assert "predictions" not in client.collections


class TestCreatePredictionStore:
    """Tests for create_prediction_store."""

    def test_memory_backend(self):
        store = create_prediction_store(Settings(store_backend="memory", model_url="/models/model.pt"))
        assert isinstance(store, InMemoryPredictionStore)

    def test_firestore_backend(self):
        """Firestore backend is built from the configured project and collection."""
        settings = Settings(
            store_backend="firestore",
            model_url="/models/model.pt",
            firestore_project="screening-prod",
            firestore_collection="screenings",
        )
        fake_client = FakeFirestoreClient()
        with patch("src.libs.storage.create_firestore_client", return_value=fake_client) as factory:
            store = create_prediction_store(settings)

        assert isinstance(store, FirestorePredictionStore)
        factory.assert_called_once_with(
            project="screening-prod",
            database=None,
            credentials_path=None,
        )
