import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
import uvicorn

from app.api.endpoints import (
    auth,
    health,
    nfts,
    user,
    wallets,
)
from app.core.config import settings
from app.db.base import Base
from app.db.session import engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("[SERVER READY] %s %s", settings.PROJECT_NAME, settings.VERSION)
    yield


# Define the FastAPI application instance
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing request fields are a plain bad request."""
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ())[1:]) or 'body'}: {err.get('msg', '')}"
        for err in errors
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"kind": "bad_request", "message": message or "Invalid request"}},
    )


@app.get("/", include_in_schema=False)
def root() -> PlainTextResponse:
    return PlainTextResponse("GarmentNFT API is running")


# Include your API routers
g_prefix = "/api"
app.include_router(health.router)
app.include_router(auth.router, prefix=g_prefix)
app.include_router(user.router, prefix=g_prefix + "/users")
app.include_router(wallets.router, prefix=g_prefix + "/users")
app.include_router(nfts.router, prefix=g_prefix + "/nfts")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG
    )
