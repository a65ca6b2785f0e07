"""
High-level use cases for the farmer API.

Each service module orchestrates repositories/adapters to implement business
rules (register, verify a phone number, reset a PIN, manage farms).

Routers (FastAPI endpoints) call these services instead of touching the
database or the SMS provider directly.
"""
