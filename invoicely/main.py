import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from invoicely.config import settings
from invoicely.exceptions import ExportError, InvoiceValidationError, LineItemNotFoundError
from invoicely.logging_config import setup_logging
from invoicely.rate_limit import limiter
from invoicely.routers import auth, customers, products_api, business_api, invoices_api

# Loglama sistemini baslat (uygulama ayaga kalkmadan once)
setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Fatura hazirlama, onizleme ve PDF export",
    version="0.1.0",
)

logger.info("%s uygulamasi baslatiliyor...", settings.APP_NAME)

# slowapi'yi FastAPI state'e bagla
app.state.limiter = limiter

# ---------------------------------------------------------------------------
# CORS Ayarlari
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
    expose_headers=["Content-Disposition", "X-Guest-Token", "X-Export-Warnings"],
)


# ---------------------------------------------------------------------------
# Guvenlik Header'lari Middleware
# ---------------------------------------------------------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Her yanita guvenlik header'lari ekler."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


app.add_middleware(SecurityHeadersMiddleware)


# ---------------------------------------------------------------------------
# Hata handler'lari
# ---------------------------------------------------------------------------
@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit asildi: %s %s", request.method, request.url)
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many requests. Please wait a moment and try again.",
            "retry_after": exc.detail,
        },
    )


@app.exception_handler(InvoiceValidationError)
async def invoice_validation_handler(request: Request, exc: InvoiceValidationError):
    """Dogrulama hatasi: taslak degismedi, mesaj kullaniciya aynen gosterilir."""
    status_code = 404 if isinstance(exc, LineItemNotFoundError) else 400
    logger.info("Dogrulama hatasi (%s %s): %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(ExportError)
async def export_error_handler(request: Request, exc: ExportError):
    logger.error("PDF export hatasi: %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Could not generate the PDF. {exc}"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Yakalanmamis hata: %s %s", request.method, request.url, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred"},
    )


# API Router'lari
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Kimlik Dogrulama"])
app.include_router(customers.router, prefix="/api/v1/customers", tags=["Musteriler"])
app.include_router(products_api.router, prefix="/api/v1/products", tags=["Envanter"])
app.include_router(business_api.router, prefix="/api/v1/business", tags=["Isletme Profili"])
app.include_router(invoices_api.router, prefix="/api/v1/invoices", tags=["Faturalar"])


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok", "app": settings.APP_NAME}
