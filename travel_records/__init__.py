"""Employee and travel-authority spreadsheet ingestion for the records API."""

__version__ = "0.1.0"
