"""Metaplay project configuration and validation, SDK version metadata, portal API client and terminal styles."""

__version__ = "0.1.0"