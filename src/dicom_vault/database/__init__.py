"""Relational store access."""

from .connection import DatabaseManager

__all__ = ["DatabaseManager"]
