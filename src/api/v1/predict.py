"""
Prediction API routes.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from dependency_injector.wiring import Provide, inject

from ...containers import Container
from ...schemas.response import PredictionResponse, HistoriesResponse, ErrorResponse
from ...services.prediction_service import PredictionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/predict", tags=["predict"])


@router.post(
    "",
    status_code=201,
    response_model=PredictionResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
@inject
async def create_prediction(
    image: UploadFile = File(..., description="Image to classify"),
    service: PredictionService = Depends(Provide[Container.prediction_service]),
):
    """
    Classify an uploaded image and store the result.

    Uploads over the size limit get 413; grayscale or undecodable images
    and any processing failure get 400.
    """
    image_bytes = await image.read()
    logger.info(f"Received image: filename={image.filename}, content_type={image.content_type}, size={len(image_bytes)}")

    record = await service.predict(image_bytes)
    return PredictionResponse(data=record)


@router.get(
    "/histories",
    response_model=HistoriesResponse,
    responses={500: {"model": ErrorResponse}},
)
@inject
async def list_histories(
    service: PredictionService = Depends(Provide[Container.prediction_service]),
):
    """
    List every stored prediction.
    """
    items = await service.list_histories()
    return HistoriesResponse(data=items)
