"""Tutoring relay endpoints mounted under /api/openai."""
