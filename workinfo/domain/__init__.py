"""Pure validation tables and helpers (no I/O)."""
