import os
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError

# === Logging ===
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# === Config ===
from featureboard.core.config import settings
from featureboard.core.db import SessionLocal, init_db
from featureboard.core.errors import FeatureBoardError, UpstreamError
from featureboard.middleware.api_logger import APILoggerMiddleware
from featureboard.services.email import seed_default_templates

# === Routers ===
from featureboard.api.v1 import admin, auth, comments, ideas, users

if not settings.email_configured:
    logger.warning("⚠️ Microsoft Graph mail settings missing, emails will be skipped.")


# === App lifecycle ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        init_db()
        db = SessionLocal()
        try:
            seed_default_templates(db)
        finally:
            db.close()
        logger.info("✅ Startup complete: database ready.")
        yield
    except Exception as e:
        logger.exception("❌ Startup failed.")
        raise e
    finally:
        logger.info("🛑 Shutdown complete.")


# === Initialize App ===
app = FastAPI(
    title="FeatureBoard API",
    version="1.0.0",
    lifespan=lifespan
)


# === Exception Handlers ===
@app.exception_handler(FeatureBoardError)
async def domain_exception_handler(request: Request, exc: FeatureBoardError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": type(exc).__name__}
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("❌ Database error")
    error = UpstreamError("Database unavailable, please retry")
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.message, "code": type(error).__name__}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"⚠️ Validation Error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_errors(exc)}
    )


def jsonable_errors(exc: RequestValidationError):
    # ctx may hold exception instances that are not JSON serializable
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


# === Middleware ===
app.add_middleware(APILoggerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === Health Check ===
@app.get("/ping")
async def ping():
    return {"status": "ok", "message": "FeatureBoard API is live"}


# === Mount API Routes ===
app.include_router(auth.router, prefix="/api")
app.include_router(ideas.router, prefix="/api")
app.include_router(comments.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(admin.router, prefix="/api")

# === Dev Hot Reload ===
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("featureboard.main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=settings.env == "dev")
