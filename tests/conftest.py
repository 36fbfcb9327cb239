"""
Pytest configuration and shared fixtures.
"""

import io
import sys
import os
import pytest
from PIL import Image

# Add repo root to path for imports
src_path = os.path.join(os.path.dirname(__file__), "..")
if src_path not in sys.path:
    sys.path.insert(0, src_path)


def _encode_image(mode: str = "RGB", size=(32, 32), color=(200, 30, 30), format: str = "PNG") -> bytes:
    """Encode a solid-color image in the given mode."""
    if mode in ("L", "1", "I", "F", "P"):
        color = color[0] if isinstance(color, tuple) else color
    elif mode == "LA":
        color = (color[0], 255)
    elif mode == "RGBA":
        color = tuple(color[:3]) + (255,)
    img = Image.new(mode, size, color)
    buffer = io.BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


class FakeClassifier:
    """Classifier stand-in returning a fixed score."""

    def __init__(self, score: float = 0.9):
        self.score = score
        self.calls = []

    def predict_score(self, batch):
        self.calls.append(batch.shape)
        return self.score


@pytest.fixture
def encode_image():
    return _encode_image


@pytest.fixture
def rgb_png():
    return _encode_image("RGB")


@pytest.fixture
def gray_png():
    return _encode_image("L")


@pytest.fixture
def fake_classifier():
    return FakeClassifier()


@pytest.fixture
def clean_store():
    """Create a clean store instance for each test."""
    from src.libs.storage import InMemoryPredictionStore

    store = InMemoryPredictionStore()
    yield store
    store.clear()


@pytest.fixture
def memory_settings():
    from src.config import Settings

    return Settings(store_backend="memory", model_url="/nonexistent/model.pt")


@pytest.fixture
def container(memory_settings, fake_classifier, clean_store):
    """Container with the classifier and store replaced by in-process fakes."""
    from dependency_injector import providers
    from src.containers import Container

    container = Container()
    container.config.override(providers.Object(memory_settings))
    container.classifier.override(providers.Object(fake_classifier))
    container.store.override(providers.Object(clean_store))
    yield container
    container.unwire()
    container.reset_override()


@pytest.fixture
def client(container):
    from fastapi.testclient import TestClient
    from src.server import create_app

    app = create_app(container)
    with TestClient(app) as test_client:
        yield test_client
