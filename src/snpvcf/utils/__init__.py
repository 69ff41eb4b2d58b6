"""Shared utilities: logging, errors, sorting and validation."""
