"""
High-level use cases for the WorkInfo API.

Each service module orchestrates the repository and domain helpers to
implement business rules (register, save a card, resolve a public card,
sanitize a tracking script). Routers call these services instead of
touching SQLAlchemy or cookies directly.
"""
