"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that features share (DB wiring,
the GitHub HTTP client, settings, logging). Keep feature-specific SQL and
business logic in the corresponding feature package (e.g. `explorer/`).
"""
