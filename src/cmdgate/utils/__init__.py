"""Shared helpers for cmdgate."""
