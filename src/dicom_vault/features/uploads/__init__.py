"""Chunked upload pipeline."""
