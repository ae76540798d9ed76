"""Disk pages, a buffer pool, catalog metadata and transaction records for a small relational database engine."""

__version__ = "0.1.0"