"""
app/domain package marker.
"""

from app.domain.ingestion import FileIngestionResult, IngestionSummary

__all__ = [
    "FileIngestionResult",
    "IngestionSummary",
]
