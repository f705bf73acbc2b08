"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from snack.backend.api.v1.endpoints import (
    analytics,
    auth,
    discover,
    lists,
    opengraph,
    profile,
    purchases,
    revenuecat,
    saved_lists,
    stripe,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(profile.router, tags=["profile"])
router.include_router(lists.router, prefix="/lists", tags=["lists"])
router.include_router(saved_lists.router, prefix="/saved-lists", tags=["saved"])
router.include_router(discover.router, tags=["discover"])
router.include_router(purchases.router, tags=["purchases"])
router.include_router(stripe.router, tags=["stripe"])
router.include_router(revenuecat.router, tags=["revenuecat"])
router.include_router(opengraph.router, tags=["opengraph"])
router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
