"""ingest/__init__.py"""
from .csv_reader import decode_upload, parse_csv_text, validate_filename

__all__ = ["decode_upload", "parse_csv_text", "validate_filename"]
