"""Paired remote/local page-load trace collection."""

__version__ = "0.1.0"
