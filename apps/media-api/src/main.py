import logging

import uvicorn

from media_api.app import app
from media_api.cores.config import settings

logging.basicConfig(level=settings.LOG_LEVEL)

__all__ = ["app"]


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
