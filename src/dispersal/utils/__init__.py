"""Logging and geometry helpers."""
