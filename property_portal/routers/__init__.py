"""
API route handlers for the Property Portal API.
"""

from .admin import router as admin_router
from .auth import router as auth_router
from .manager_requests import router as manager_requests_router
from .property_owners import router as property_owners_router
from .rental_applications import router as rental_applications_router
from .stripe_webhooks import router as stripe_router
from .tenant import router as tenant_router
from .uploads import router as uploads_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "manager_requests_router",
    "property_owners_router",
    "rental_applications_router",
    "stripe_router",
    "tenant_router",
    "uploads_router",
    "users_router",
]
