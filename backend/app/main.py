from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware

from .api.deps import shared_chat_client
from .api.recipes import router as recipes_router
from .api.websocket import router as ws_router
from .core.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if shared_chat_client.cache_info().currsize:
        await shared_chat_client().aclose()


app = FastAPI(title="chefspeak", version="0.1.0", description="Streaming multilingual recipe assistant", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers BEFORE static files mount
app.include_router(recipes_router)
app.include_router(ws_router)

@app.get("/api/health")
async def health_check():
    return {"status": "ok", "message": "chefspeak API is running", "openai_configured": settings.openai_configured}

# Serve the built client if present (this should be LAST)
if os.path.isdir(settings.static_dir):
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
