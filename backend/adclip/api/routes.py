from fastapi import APIRouter
from .v1 import script_matching, videos

api_router = APIRouter(prefix="/api", tags=["script-matching"])

api_router.include_router(script_matching.router, prefix="/v1", tags=["script-matching"])
api_router.include_router(videos.router, prefix="/v1", tags=["videos"])


@api_router.get("/health")
def health():
    return {"status": "ok"}
