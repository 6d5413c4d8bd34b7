# pharmadir/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pharmadir.config import settings
from pharmadir.core.db import init_db, close_db
from pharmadir.core.context import build_context
from pharmadir.core.errors import ServiceError
from pharmadir.core.bootstrap import ensure_default_admin
from pharmadir.services.store_base import StoreConflictError

from pharmadir.api.v1.routers import auth, favorites, comments, pharmacies

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.to_dict()})

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Report field locations only; raw input values stay out of the response
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": {"code": "INVALID_INPUT", "message": "Invalid request", "fields": fields}},
    )

@app.exception_handler(StoreConflictError)
async def conflict_handler(request: Request, exc: StoreConflictError):
    logger.error("[store] %s", exc)
    return JSONResponse(
        status_code=409,
        content={"success": False, "error": {"code": "CONFLICT", "message": "Too many concurrent updates, please retry"}},
    )

@app.on_event("startup")
async def on_startup():
    await init_db()
    app.state.context = build_context(settings)
    # Ensure there's a default admin account on first run
    await ensure_default_admin(app.state.context)

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(favorites.router, prefix="/api/v1")
app.include_router(pharmacies.router, prefix="/api/v1")
app.include_router(comments.router, prefix="/api/v1")

@app.get("/healthz")
def healthz():
    return {"ok": True}
