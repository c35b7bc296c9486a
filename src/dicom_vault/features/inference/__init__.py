"""Delegated AI inference."""
