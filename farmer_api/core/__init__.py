"""
Core utilities shared across the farmer API.

This package hosts configuration, logging setup, PIN hashing, OTP generation
and the SMS adapter. Services depend on these primitives instead of importing
FastAPI or storage layers directly.
"""
