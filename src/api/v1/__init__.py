from .predict import router as predict_router

__all__ = ["predict_router"]
