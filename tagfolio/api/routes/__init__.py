"""
API Routes for Tagfolio

Route modules:
- auth: Registration, login, current user
- records: Record CRUD and search
"""

from tagfolio.api.routes.auth import router as auth_router
from tagfolio.api.routes.records import router as records_router

__all__ = [
    "auth_router",
    "records_router",
]
