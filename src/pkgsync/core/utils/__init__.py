"""Shared helpers for pkgsync core."""
