"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import admin, auth, bookings

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
