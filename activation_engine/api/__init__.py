"""API router for v1 endpoints."""

from fastapi import APIRouter

from activation_engine.api import flowbar

router = APIRouter()

# Best next action + recommendation audit routes
router.include_router(flowbar.router, tags=["flowbar"])
