from .runner import BatchProcessor, BatchRecord, ImageResults

__all__ = ["BatchProcessor", "BatchRecord", "ImageResults"]
