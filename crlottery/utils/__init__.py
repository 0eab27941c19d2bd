"""Logging, validation and formatting helpers."""
