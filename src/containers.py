"""
Dependency injection container using dependency-injector.
"""

from dependency_injector import containers, providers

from .config import Settings
from .libs.storage import create_prediction_store
from .services.model_loader import load_classifier_from_settings
from .services.prediction_service import PredictionService


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Configuration
    config = providers.Singleton(Settings)

    # Document store (Firestore or in-memory, per STORE_BACKEND)
    store = providers.Singleton(create_prediction_store, settings=config)

    # Shared classifier, loaded once at startup
    classifier = providers.Singleton(load_classifier_from_settings, settings=config)

    # Prediction orchestration
    prediction_service = providers.Singleton(
        PredictionService,
        classifier=classifier,
        store=store,
        max_upload_bytes=config.provided.max_upload_bytes,
        image_size=config.provided.image_size,
        threshold=config.provided.prediction_threshold,
    )
