"""RetroSnap gateway FastAPI application."""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from retrosnap_gateway import logging_client
from retrosnap_gateway.config import settings
from retrosnap_gateway.container import get_container, init_container
from retrosnap_gateway.errors import ConfigurationError, GatewayError

# Initialize logger (module loggers under the package propagate to it)
logger = logging_client.setup_logger('retrosnap_gateway')

init_container()

# Create FastAPI app
app = FastAPI(
    title="RetroSnap Gateway",
    version=settings.SERVICE_VERSION,
    description="Credit-metered, authenticated proxy in front of the image-generation API"
)

API_PREFIX = "/api-proxy"


# Keep above the CORS registration; CORS must stay the outermost layer
@app.middleware("http")
async def fail_closed_on_missing_configuration(request: Request, call_next):
    """Answer every /api-proxy path with 500 while required settings are missing, routed or not."""
    if request.url.path == API_PREFIX or request.url.path.startswith(API_PREFIX + "/"):
        missing = settings.missing_required()
        if missing:
            logger.error(f"Refusing {request.method} {request.url.path}: missing configuration {', '.join(missing)}")
            error = ConfigurationError()
            return JSONResponse(status_code=error.status_code, content=error.to_body())
    return await call_next(request)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,  # Bearer token in header, not cookies
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    field = ".".join(str(p) for p in errors[0].get("loc", ())[1:]) if errors else ""
    message = f"Invalid value for '{field}'." if field else "Invalid request."
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "An internal error occurred."})


@app.on_event("startup")
async def startup_event():
    """Validate configuration and prepare storage on startup."""
    logger.info(f"🚀 Starting {settings.SERVICE_NAME} v{settings.SERVICE_VERSION}")
    logger.info(f"💾 Storage backend: {settings.STORAGE_BACKEND}")
    logger.info(f"🎟️  Initial credits: {settings.INITIAL_CREDITS}")

    missing = settings.missing_required()
    if missing:
        logger.error(f"❌ Missing configuration: {', '.join(missing)} - all API routes will return 500")

    if settings.is_dev_context:
        logger.warning("⚠️  CONTEXT=dev - development token is accepted")

    if settings.STORAGE_BACKEND.strip().lower() == "dynamodb":
        from retrosnap_gateway import init_dynamodb
        try:
            tables_created = await init_dynamodb.initialize_all_tables()
            if tables_created:
                logger.info(f"Created tables: {', '.join(tables_created)}")
            else:
                logger.info("All tables already exist")
        except Exception as e:
            # The store reports its own errors per request; keep serving.
            logger.error(f"Failed to initialize DynamoDB tables: {e}")

    logger.info("✅ Gateway ready")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("👋 Shutting down gateway")
    container = get_container()
    await container.identity_client().close()
    await container.model_client().close()


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Health status
    """
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION
    }


# Register API routers
from retrosnap_gateway.api import user, admin, generation  # noqa: E402
app.include_router(user.router)
app.include_router(admin.router)
app.include_router(generation.router)

logger.info("📦 Gateway module loaded")
