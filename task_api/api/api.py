from fastapi import APIRouter
from .endpoints import admin, auth, tasks

router = APIRouter()

# Include all API endpoints
router.include_router(auth.router, prefix="/auth", tags=["authentication"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
