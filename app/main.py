"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import engine, Base
from app.errors import register_error_handlers
from app import models  # noqa: F401  (register tables)
from app.routes import users, boxes, categories, customers, products, orders, payments, dashboard, summary

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Back office for boxes, products, customers, orders and payments",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_error_handlers(app)

if not settings.is_production:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

# Include routers
app.include_router(users.router, prefix="/api")
app.include_router(boxes.router, prefix="/api")
app.include_router(categories.router, prefix="/api")
app.include_router(customers.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(orders.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(summary.router, prefix="/api")


@app.get("/")
async def root():
    """API index."""
    return {
        "success": True,
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"success": True, "status": "healthy", "environment": settings.ENVIRONMENT}


def run():
    """Console entry point: serve the app with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
