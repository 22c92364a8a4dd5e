"""Domain models for the travel-records ingestion pipeline."""

from .error_record import ErrorRecord
from .fields import EMPLOYEE_SCHEMA, TRAVEL_SCHEMA, FieldSpec, RecordKind, RecordSchema, get_schema
from .outcome import Failure, FailureKind, Success, UploadOutcome
from .processing_result import FileStat, ProcessingResult
from .records import Batch, CandidateRecord, DropReason, RawRow, ValidatedRecord

__all__ = [
    # Field tables
    "RecordKind",
    "FieldSpec",
    "RecordSchema",
    "EMPLOYEE_SCHEMA",
    "TRAVEL_SCHEMA",
    "get_schema",
    # Pipeline models
    "RawRow",
    "CandidateRecord",
    "ValidatedRecord",
    "DropReason",
    "Batch",
    # Outcomes
    "FailureKind",
    "Success",
    "Failure",
    "UploadOutcome",
    # Reporting
    "ErrorRecord",
    "FileStat",
    "ProcessingResult",
]
