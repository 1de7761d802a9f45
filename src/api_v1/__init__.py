from fastapi import APIRouter

from .oauth.views import router as oauth_router
from .platforms.views import router as platforms_router

router = APIRouter()
router.include_router(router=oauth_router, prefix="/auth")
router.include_router(router=platforms_router, prefix="/platforms")
