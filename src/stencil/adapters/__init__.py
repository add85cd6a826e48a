"""Filesystem and process adapters."""
