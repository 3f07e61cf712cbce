from __future__ import annotations

from fastapi import APIRouter

from monji_web.ui.collections import router as collections_router
from monji_web.ui.databases import router as databases_router
from monji_web.ui.documents import router as documents_router
from monji_web.ui.environments import router as environments_router
from monji_web.ui.session import router as session_router

router = APIRouter()

router.include_router(session_router)
router.include_router(environments_router)
router.include_router(databases_router)
router.include_router(collections_router)
router.include_router(documents_router)
