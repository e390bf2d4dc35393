"""
API v1 routes.
"""

from fastapi import APIRouter

from lockdown.api.v1 import items, lockdown

router = APIRouter()

router.include_router(items.router, prefix="/items", tags=["Items"])
router.include_router(lockdown.router, prefix="/lockdown", tags=["Lockdown"])
