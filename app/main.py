from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.api.v1 import auth, users, tickets, reviews, chats, blog, analytics
from app.utils.logger import logger

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.APP_DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["Authentication"])
app.include_router(users.router, prefix=f"{settings.API_V1_PREFIX}/users", tags=["Users"])
app.include_router(tickets.router, prefix=f"{settings.API_V1_PREFIX}/tickets", tags=["Tickets"])
app.include_router(reviews.router, prefix=f"{settings.API_V1_PREFIX}/reviews", tags=["Reviews"])
app.include_router(chats.router, prefix=f"{settings.API_V1_PREFIX}/chats", tags=["Chat"])
app.include_router(blog.router, prefix=f"{settings.API_V1_PREFIX}/blog", tags=["Knowledge Base"])
app.include_router(analytics.router, prefix=f"{settings.API_V1_PREFIX}/analytics", tags=["Analytics"])


@app.get("/")
async def root():
    return {
        "message": "Helpdesk Portal API",
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "storage": settings.STORAGE_BACKEND,
    }


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.STORAGE_BACKEND} storage)")

    if settings.STORAGE_BACKEND == "sql" and settings.DATABASE_AUTO_CREATE:
        from app.database import create_tables
        await create_tables()


@app.on_event("shutdown")
async def shutdown_event():
    from app.database import engine

    await engine.dispose()
    logger.info("Shutting down application")
