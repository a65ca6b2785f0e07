"""Farmer registration and account-management API."""
