"""
Browser extension API.

Mounted at /api/extension, outside the versioned API.
"""

from fastapi import APIRouter

from snack.backend.api.extension import auth, lists

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["extension"])
router.include_router(lists.router, prefix="/lists", tags=["extension"])
