"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules: ``core`` (configuration, logging, errors, security and
storage), ``services`` (business rules), ``schemas`` (request and
response models) and ``api`` (versioned routers).
"""

from .main import app  # noqa: F401
