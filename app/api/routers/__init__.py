"""
app/api/routers package marker.
"""

from app.api.routers.demand_router import router as demand_router

__all__ = [
    "demand_router",
]
