"""User intake service: multipart form + JSON API ingestion into file storage and SQL."""

__version__ = "0.1.0"
