"""
Top-level router for version 1 of the API.

This router aggregates the domain routers (authentication, accounts,
users) under a unified prefix.  When new domains are introduced,
update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import accounts, auth, users

router = APIRouter()

# The login route defines its own "/login" path.
router.include_router(auth.router, tags=["authentication"])
router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
router.include_router(users.router, prefix="/users", tags=["users"])
