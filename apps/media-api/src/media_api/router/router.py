from fastapi import APIRouter
from media_api.controllers import media

api_router = APIRouter()

api_router.include_router(media.router, prefix="/videos", tags=["Media"])
