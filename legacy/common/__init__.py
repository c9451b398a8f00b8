"""Shared, non-web building blocks (aspects and utilities)."""
