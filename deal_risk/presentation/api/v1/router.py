from fastapi import APIRouter

from .risk import risk_router

router = APIRouter()

router.include_router(risk_router, tags=["Risk"])
