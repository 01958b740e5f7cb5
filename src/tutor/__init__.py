"""Tutor-side roster and detail navigation."""
