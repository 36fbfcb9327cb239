"""
Model artifact download and the shared classifier.
"""

import hashlib
import logging
import os
import time
from urllib.parse import urlparse

import numpy as np
import requests
import torch

from ..exceptions import ModelLoadError

logger = logging.getLogger(__name__)


def is_url(path: str) -> bool:
    """Check if a string is a URL."""
    if not isinstance(path, str):
        return False
    return path.startswith("http://") or path.startswith("https://")


def cached_model_path(url: str, cache_dir: str) -> str:
    """Local path a URL is cached under: ``{name}_{hash}{ext}`` inside ``cache_dir``."""
    url_hash = hashlib.md5(url.encode()).hexdigest()[:16]

    parsed = urlparse(url)
    filename = parsed.path.split("/")[-1] or f"model_{url_hash}.pt"
    name, ext = os.path.splitext(filename)
    if not ext:
        ext = ".pt"
    return os.path.join(cache_dir, f"{name}_{url_hash}{ext}")


def download_model(url: str, cache_dir: str, timeout: int = 600) -> str:
    """
    Download a model artifact to the cache directory.

    A single attempt is made. A cached, non-empty file is reused.

    Args:
        url: URL to download from
        cache_dir: Directory to cache downloaded files
        timeout: Download timeout in seconds

    Returns:
        Local file path of the downloaded artifact
    """
    os.makedirs(cache_dir, exist_ok=True)
    local_path = cached_model_path(url, cache_dir)

    if os.path.exists(local_path) and os.path.getsize(local_path) > 0:
        logger.info(f"Model already cached: {local_path}")
        return local_path

    logger.info(f"Downloading model from {url}...")
    start_time = time.perf_counter()
    temp_path = local_path + ".tmp"
    try:
        response = requests.get(url, timeout=timeout, stream=True)
        response.raise_for_status()

        expected_size = None
        if response.headers.get("Content-Length"):
            try:
                expected_size = int(response.headers.get("Content-Length"))
            except ValueError:
                expected_size = None

        bytes_written = 0
        with open(temp_path, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                if not chunk:
                    continue
                f.write(chunk)
                bytes_written += len(chunk)

        if bytes_written == 0:
            raise RuntimeError("Model file is empty (0 bytes)")
        if expected_size is not None and bytes_written != expected_size:
            raise RuntimeError(f"Incomplete download: expected {expected_size} bytes, got {bytes_written} bytes")

        os.replace(temp_path, local_path)
    except Exception:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise

    elapsed = time.perf_counter() - start_time
    file_size = os.path.getsize(local_path) / (1024 * 1024)
    logger.info(f"[TIMING] download_model: {url} {elapsed:.3f}s ({file_size:.1f}MB)")
    return local_path


class CancerClassifier:
    """
    Read-only wrapper around a TorchScript binary classifier.

    One instance is shared by all requests. ``predict_score`` does not
    mutate the wrapped module, so concurrent calls need no locking.
    """

    def __init__(self, module: torch.nn.Module, device: str = "cpu", input_layout: str = "nhwc"):
        if input_layout not in ("nhwc", "nchw"):
            raise ValueError(f"Unsupported input layout: {input_layout}")
        self._module = module.to(device).eval()
        self.device = device
        self.input_layout = input_layout

    def predict_score(self, batch: np.ndarray) -> float:
        """
        Args:
            batch: float32 array of shape (1, H, W, 3)

        Returns:
            The model's first output value as a probability
        """
        if batch.ndim != 4 or batch.shape[-1] != 3:
            raise ValueError("Expected batch shape (B, H, W, 3)")

        tensor = torch.from_numpy(np.ascontiguousarray(batch, dtype=np.float32))
        if self.input_layout == "nchw":
            tensor = tensor.permute(0, 3, 1, 2).contiguous()

        with torch.inference_mode():
            output = self._module(tensor.to(self.device))

        if isinstance(output, (list, tuple)):
            output = output[0]
        return float(output.reshape(-1)[0].item())


def load_classifier(
    model_url: str,
    cache_dir: str = "/tmp/model_cache",
    device: str = "cpu",
    input_layout: str = "nhwc",
    timeout: int = 600,
) -> CancerClassifier:
    """
    Fetch (if remote) and deserialize the model artifact.

    Raises:
        ModelLoadError: If the artifact cannot be downloaded or loaded
    """
    start_time = time.perf_counter()
    try:
        path = download_model(model_url, cache_dir, timeout=timeout) if is_url(model_url) else model_url
        if not os.path.exists(path):
            raise FileNotFoundError(f"Model file not found: {path}")
        module = torch.jit.load(path, map_location=device)
        classifier = CancerClassifier(module, device=device, input_layout=input_layout)
    except Exception as e:
        raise ModelLoadError(model_url, str(e)) from e

    elapsed = time.perf_counter() - start_time
    logger.info(f"[TIMING] load_model: {elapsed:.3f}s (device={device}, layout={input_layout})")
    return classifier


def load_classifier_from_settings(settings) -> CancerClassifier:
    return load_classifier(
        model_url=settings.model_url,
        cache_dir=settings.model_cache_dir,
        device=settings.device,
        input_layout=settings.model_input_layout,
        timeout=settings.model_download_timeout,
    )
