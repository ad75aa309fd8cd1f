"""
Core module for fiscal XML processing.

This module provides:
- Document models (FiscalRecord, NcmSummary, MonthlyRevenue, SkippedSequence)
- Aggregation by NCM and by month
- Numbering gap detection
- Batch processing and export

The batch processor is imported from core.batch_processor directly
(it depends on the extractors package).
"""

from .exceptions import EmptyBatchError, ExportError, LeitorXmlException, XmlParseError
from .models import (
    DocumentType,
    FiscalRecord,
    MonthlyRevenue,
    NcmSummary,
    SkippedSequence,
    XmlDocument,
)

__all__ = [
    # Models
    "DocumentType",
    "FiscalRecord",
    "NcmSummary",
    "MonthlyRevenue",
    "SkippedSequence",
    "XmlDocument",
    # Exceptions
    "LeitorXmlException",
    "XmlParseError",
    "EmptyBatchError",
    "ExportError",
]
