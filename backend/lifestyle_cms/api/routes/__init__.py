"""
API route modules.

Import all route modules here for easy access.
"""

from lifestyle_cms.api.routes import carousel_items, carousels, slots

__all__ = ["carousels", "carousel_items", "slots"]
