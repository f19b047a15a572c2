import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from media_api.cores import injectable
from media_api.cores.config import settings
from media_api.router.router import api_router
from media_api.services.upload_flow import MediaUploadService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Media API...")
    s3_client = injectable.build_s3_client(settings)
    injectable._MediaService = MediaUploadService.build(s3_client, settings.pipeline_config())
    logger.info(f"Object store ready: bucket={settings.S3_BUCKET_NAME} endpoint={settings.S3_ENDPOINT}")

    yield

    logger.info("Stopping Media API...")
    injectable._MediaService = None


app = FastAPI(
    title=settings.PROJECT_NAME,
    lifespan=lifespan,
    swagger_ui_parameters={"syntaxHighlight": {"theme": "nord"}}
)

# CORS
origins = ["http://localhost:5173", "*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")

@app.get("/health")
def health():
    return {"status": "ok", "service": "media-api"}
