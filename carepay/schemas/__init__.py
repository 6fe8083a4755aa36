"""Pydantic schemas for gateway payloads and API bodies."""
