"""
End-to-end card scan service.
"""

from src.pipeline.full_pipeline import CardScanService

__all__ = ["CardScanService"]
