"""Pure domain values and helpers (no I/O)."""
