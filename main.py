from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from contextlib import asynccontextmanager
from pathlib import Path
import logging
import traceback

from qarz_portal.api.auth_routes import router as auth_router
from qarz_portal.api.loan_routes import router as loan_router
from qarz_portal.api.admin_routes import router as admin_router
from qarz_portal.api.audit_routes import router as audit_router
from qarz_portal.database.connection import init_db
from qarz_portal.core.config import settings

logger = logging.getLogger("server_exception_handler")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to every non-OPTIONS response.

    OPTIONS requests are left to CORSMiddleware, which is registered after
    this middleware and therefore runs first.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if request.method != "OPTIONS":
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["X-XSS-Protection"] = "1; mode=block"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Interest-free loan applications, guarantors, review tokens and appointment slips",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    body = {
        "error": {
            "code": exc.status_code,
            "message": str(exc.detail) if exc.detail else exc.status_code,
            "status_code": exc.status_code
        }
    }
    logger.warning(f"HTTPException handled: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = {
        "error": {
            "code": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
        }
    }
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exc()
    logger.error(f"Unhandled exception: {str(exc)}\n{tb}")
    body = {
        "error": {
            "code": "internal_server_error",
            "message": "An unexpected error occurred",
            "details": str(exc)
        }
    }
    return JSONResponse(status_code=500, content=body)


# Supports comma-separated CLIENT_URL values
raw_origins = settings.CLIENT_URL or ""
allowed_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
if not allowed_origins:
    allowed_origins = ["http://localhost:3000"]

# Middleware runs LIFO: CORSMiddleware is added last so it handles preflights first
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
        "Accept-Language",
        "Content-Language",
        "X-Requested-With",
        "Cache-Control",
        "Pragma",
    ],
    expose_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.include_router(auth_router)
app.include_router(loan_router)
app.include_router(admin_router)
app.include_router(audit_router)

# Uploaded documents are referenced as /uploads/<file name>
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/")
async def root():
    return {"message": "Qarze Hasana loan portal API is running!"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "message": "API is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
