"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from backoffice.api.endpoints import (auth, dashboard, health, offers,
                                      products, sales)

api_router = APIRouter()

# Health probe (public)
api_router.include_router(health.router)

# Login & current user
api_router.include_router(auth.router)

# Reporting
api_router.include_router(dashboard.router)
api_router.include_router(sales.router)

# Catalogue CRUD
api_router.include_router(products.router)
api_router.include_router(offers.router)
