from fastapi import APIRouter
from modernband.api.v1.routes.auth import router as auth_router
from modernband.api.v1.routes.public import router as public_router
from modernband.api.v1.routes.booking import router as booking_router
from modernband.api.v1.routes.admin import router as admin_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(public_router)
api_router.include_router(booking_router)
api_router.include_router(admin_router)
