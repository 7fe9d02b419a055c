"""Background worker helpers for GUI tasks."""

from .image_load_worker import ImageLoadWorker, ImageLoadWorkerSignals

__all__ = ["ImageLoadWorker", "ImageLoadWorkerSignals"]
