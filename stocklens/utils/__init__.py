"""Shared utilities: logging, errors and resilience helpers."""
