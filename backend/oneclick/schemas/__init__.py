"""Schemas — Pydantic models for request bodies and gateway responses."""
