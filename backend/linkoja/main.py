import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .core.errors import register_exception_handlers
from .core.settings import get_settings
from .db import Base, engine
from .routers import auth, business, admin, notification, verification

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Backend API for the Linkoja local business directory",
    version="1.0.0",
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


# Include routers
app.include_router(auth.router)
app.include_router(business.router)
app.include_router(admin.router)
app.include_router(notification.router)
app.include_router(verification.router)


@app.on_event("startup")
def create_tables():
    # schema bootstrap; an unreachable database should not stop the process from serving /health
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")
    except Exception as e:
        logger.error(f"Database initialisation failed: {e}")

@app.get("/health")
async def health_check():
    return {"status": "healthy", "message": f"{settings.app_name} is running"}

@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("linkoja.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
