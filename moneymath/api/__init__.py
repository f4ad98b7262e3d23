"""
API routes for the calculators.
"""

from fastapi import APIRouter

from moneymath.api import calculations, portfolio

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(portfolio.router, prefix="/portfolio", tags=["portfolio"])
