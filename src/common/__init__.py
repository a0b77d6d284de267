"""Shared helpers: logging utilities."""
