"""Shared I/O and logging helpers."""
