"""
Logistik ERP API
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from logistik.core.config import settings
from logistik.core.database import init_db
from logistik.core.errors import register_exception_handlers
from logistik.core.rate_limit import RateLimitMiddleware
from logistik.api.v1 import (
    auth, dashboard, master, operations, finance, quotations, reports, recycle_bin, manage_users
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Headers the browser client sends to /manage-users
ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} ready ({settings.ENVIRONMENT})")
    yield


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

# Added last so it wraps the rate limiter and 429 responses still carry CORS headers
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_origins_list != ["*"],
    allow_methods=["*"],
    allow_headers=ALLOWED_HEADERS,
)

register_exception_handlers(app)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


for module in (auth, dashboard, master, operations, finance, quotations, reports, recycle_bin):
    app.include_router(module.router, prefix=API_PREFIX)
app.include_router(operations.files_router, prefix=API_PREFIX)
# Mounted at the root, outside the versioned API
app.include_router(manage_users.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
