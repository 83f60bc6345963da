"""API v1 module."""

from fastapi import APIRouter

from eip712_authn.api.v1.endpoints import auth

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router)
