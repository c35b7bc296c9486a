"""Uploaded file reads and deletion."""
