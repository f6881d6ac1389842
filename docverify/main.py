"""
DocVerify - API FastAPI

Verificació de documents de viatge: OCR → MRZ → camps amb confiança →
validació documental + elegibilitat de visat.
"""
import time
import logging
import json
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from docverify.config import settings
from docverify.routes import verify


_RESERVED_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """Format JSON per logs estructurats (compatible amb Datadog, Loki, etc.)"""
    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        # Afegir camps extra (mètriques, context)
        for key, val in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = val
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root = logging.getLogger("ocr")
    root.setLevel(settings.log_level.upper())
    root.handlers = [handler]
    root.propagate = False


_configure_logging()
log = logging.getLogger("ocr.request")

# Crear app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Verificació de documents de viatge (MRZ TD1/TD3) i elegibilitat de visat",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # En producció, especificar origins concrets
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware de latència i logging de peticions
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Registra mètrica de latència per a cada petició."""
    t0 = time.monotonic()
    response = await call_next(request)
    durada_ms = round((time.monotonic() - t0) * 1000)
    log.info(
        "http_request",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "durada_ms": durada_ms,
        }
    )
    return response


# Routes
app.include_router(verify.router, tags=["Verificació"])


@app.get("/")
async def root():
    """Root endpoint - retorna només estat bàsic"""
    return {"status": "ok"}


@app.get("/health")
async def health():
    """Endpoint de health check"""
    from docverify.services.tesseract_service import tesseract_service
    from docverify.services.google_vision_service import google_vision_service

    return {
        "status": "healthy",
        "services": {
            "tesseract": tesseract_service.is_available(),
            "google_vision": google_vision_service.is_available()
        }
    }
