"""
REST API

Structure:
- health.py   - liveness endpoint
- devices.py  - configured devices (password masked)
- aliases.py  - configured aliases
- items.py    - CRUD over /api/v1/devices/{dev}/{alias}[/{id}]
"""
from fastapi import APIRouter

from .health import router as health_router
from .devices import router as devices_router
from .aliases import router as aliases_router
from .items import router as items_router

router = APIRouter()

router.include_router(health_router)
router.include_router(devices_router)
router.include_router(aliases_router)
router.include_router(items_router)
