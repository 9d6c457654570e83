"""
API routes initialization.

This module aggregates all API routers and provides a single router
to include in the main application.
"""

from fastapi import APIRouter

from lifestyle_cms.api.routes import carousel_items, carousels, slots

# Create main API router
api_router = APIRouter()

# Carousels and their items
api_router.include_router(carousels.router)
api_router.include_router(carousel_items.router)

# Singleton slots, memberships and reference cleanup
api_router.include_router(slots.router)
