"""API router aggregation"""
from fastapi import APIRouter
from app.api.endpoints import auth_endpoints, health_endpoints

api_router = APIRouter()

api_router.include_router(auth_endpoints.router,   tags=["Authentication"])
api_router.include_router(health_endpoints.router, tags=["Health"])
