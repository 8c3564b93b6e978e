"""Validation and normalization of zipped HTML email templates."""

__version__ = "0.1.0"
