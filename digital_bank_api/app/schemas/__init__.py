"""
Pydantic schema definitions for API payloads.

Each domain (accounts, users, authentication) defines its own Pydantic
models for request and response bodies.  Schemas are separated from
the store records so the API representation never leaks stored
password hashes.
"""
