import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from datetime import datetime

from .config import settings
from .api.routes import router, get_ai_client, VERSION
from .api.middleware import setup_middleware
from .core.catalog import get_catalog

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🎨 Starting ArtSoul School Matcher...")

    try:
        catalog = get_catalog()
        logger.info(
            f"✅ Catalogs loaded: {len(catalog.questions)} questions, "
            f"{len(catalog.schools)} schools"
        )
        get_ai_client()
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise

    yield

    logger.info("👋 Shutting down...")


app = FastAPI(
    title="ArtSoul School Matcher",
    description="Art school personality quiz with AI-generated result analysis",
    version=VERSION,
    lifespan=lifespan
)

setup_middleware(app)

app.include_router(router, prefix="/api/v1", tags=["Quiz"])


@app.get("/", response_class=HTMLResponse)
async def root():
    return HTMLResponse(content="""
    <!DOCTYPE html>
    <html lang="ko">
    <head>
        <meta charset="utf-8">
        <title>ArtSoul - 해외 명문미대 매칭 테스트</title>
        <style>
            body { font-family: sans-serif; max-width: 720px; margin: 0 auto; padding: 20px; }
            .endpoint { background: #f6f6f6; padding: 10px; margin: 5px 0; border-radius: 4px; }
        </style>
    </head>
    <body>
        <h1>ArtSoul</h1>
        <p>나에게 운명 같은 해외 명문 미대는?</p>
        <div class="endpoint"><strong>GET</strong> /api/v1/questions</div>
        <div class="endpoint"><strong>POST</strong> /api/v1/quiz/result</div>
        <div class="endpoint"><strong>GET</strong> /api/v1/schools</div>
        <div class="endpoint"><strong>GET</strong> /api/v1/health</div>
        <p><a href="/docs">API documentation</a></p>
    </body>
    </html>
    """)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "timestamp": datetime.now().isoformat()
        }
    )
