"""Stockroom: material stock ledger, BOM registry and work-order consumption."""

__version__ = "1.0.0"
