"""
Cross-cutting infrastructure: configuration, logging, errors,
security primitives and the SQLite-backed document store.
"""
