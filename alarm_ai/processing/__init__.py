from .batch_processor import BatchRowProcessor, RunSummary

__all__ = ["BatchRowProcessor", "RunSummary"]
