"""
Configuration management for the prediction server.
"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    # Server settings
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Model artifact (TorchScript). May be an http(s) URL or a local path. Required.
    model_url: str = Field(..., alias="MODEL_URL")
    model_cache_dir: str = Field(default="/tmp/model_cache", alias="MODEL_CACHE_DIR")
    model_download_timeout: int = Field(default=600, alias="MODEL_DOWNLOAD_TIMEOUT")

    # "nhwc" matches the exported graph model; "nchw" for models traced from torchvision.
    model_input_layout: Literal["nhwc", "nchw"] = Field(default="nhwc", alias="MODEL_INPUT_LAYOUT")

    # Device settings
    device: str = Field(default="cpu", alias="DEVICE")

    # Preprocessing / decision
    image_size: int = Field(default=224, alias="IMAGE_SIZE")
    max_upload_bytes: int = Field(default=1_000_000, alias="MAX_UPLOAD_BYTES")
    prediction_threshold: float = Field(default=0.5, alias="PREDICTION_THRESHOLD")

    # Document store
    # - "firestore": Google Cloud Firestore (production)
    # - "memory": process-local store, lost on restart (local development)
    store_backend: Literal["firestore", "memory"] = Field(default="firestore", alias="STORE_BACKEND")
    firestore_project: Optional[str] = Field(default=None, alias="FIRESTORE_PROJECT")
    firestore_database: Optional[str] = Field(default=None, alias="FIRESTORE_DATABASE")
    firestore_collection: str = Field(default="predictions", alias="FIRESTORE_COLLECTION")

    # Service account JSON; falls back to application default credentials when unset
    google_credentials_path: Optional[str] = Field(default=None, alias="GOOGLE_APPLICATION_CREDENTIALS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True
