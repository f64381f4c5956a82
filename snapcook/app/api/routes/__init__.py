from fastapi import APIRouter

from snapcook.app.api.routes import extract, status

api_router = APIRouter()
api_router.include_router(status.router)
api_router.include_router(extract.router)
