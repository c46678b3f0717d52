import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.settings import get_settings
from app.core.handlers import AVAILABLE_ENDPOINTS, register_exception_handlers
from app.core.runtime import uptime_seconds, utc_timestamp
from app.middleware.body_limit import BodyLimitMiddleware
from app.middleware.request_context import RequestContextMiddleware
from app.routers import sftp, health

# OpenTelemetry (opcional)
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "SFTP Proxy iniciado | host=%s port=%s env=%s version=%s",
        settings.HOST, settings.PORT, settings.APP_ENV, settings.APP_VERSION,
    )
    logger.info("Endpoints disponibles: %s", ", ".join(AVAILABLE_ENDPOINTS))
    yield
    logger.info("SFTP Proxy detenido")


app = FastAPI(title="SFTP Proxy API", version=settings.APP_VERSION, lifespan=lifespan)
app.add_middleware(BodyLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

# Instrumentación OTEL si está habilitada
if settings.ENABLE_OTEL:
    resource = Resource(attributes={"service.name": settings.OTEL_SERVICE_NAME})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    FastAPIInstrumentor.instrument_app(app)
    logger.info("OpenTelemetry habilitado -> %s", settings.OTEL_EXPORTER_OTLP_ENDPOINT)
else:
    logger.info("OpenTelemetry deshabilitado")

# Routers
app.include_router(sftp.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "status": "ok",
        "message": "Servidor SFTP Proxy operativo",
        "version": settings.APP_VERSION,
        "uptime": uptime_seconds(),
        "timestamp": utc_timestamp(),
        "endpoints": {
            "health": "GET /health",
            "testConnection": "POST /sftp/test-connection",
            "listFolders": "POST /sftp/list-folders",
            "listFiles": "POST /sftp/list",
            "downloadFile": "POST /sftp/download",
        },
    }


# Incluir trace-id en todas las respuestas (si OTEL está activo)
from opentelemetry.trace import get_current_span
from starlette.responses import Response
from starlette.requests import Request

@app.middleware("http")
async def add_trace_headers(request: Request, call_next):
    response: Response = await call_next(request)
    span = get_current_span()
    if span and span.get_span_context().trace_id:
        trace_id = format(span.get_span_context().trace_id, '032x')
        response.headers["x-trace-id"] = trace_id
    return response


def run() -> None:
    import uvicorn

    # uvicorn drena los requests en curso ante SIGTERM/SIGINT
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
