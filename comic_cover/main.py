"""
Comic Cover - Main Application

Turns a short personality quiz and a selfie into an AI-generated
superhero comic cover, then into a seven-panel origin story.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import uvicorn
from contextlib import asynccontextmanager
from pathlib import Path
import logging
import sys
import traceback
from datetime import datetime

from comic_cover.config import get_settings
from comic_cover.services.logger import init_logger
from comic_cover.services.replicate_client import ReplicateService
from comic_cover.services.generation import GenerationService, PollPolicy, GenerationParams
from comic_cover.services.chat import ChatService
from comic_cover.services.cover import CoverService
from comic_cover.services.dialogue import DialogueService
from comic_cover.services.cloudinary_storage import CloudinaryStorageService
from comic_cover.api.routes import router, set_services

# Configure logging to both file and console
log_dir = Path("logs")
log_dir.mkdir(exist_ok=True)
log_file = log_dir / f"comiccover_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

file_formatter = logging.Formatter(
    '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_formatter = logging.Formatter('%(message)s')

# File handler (detailed logs)
file_handler = logging.FileHandler(log_file, encoding='utf-8')
file_handler.setLevel(logging.DEBUG)
file_handler.setFormatter(file_formatter)

# Console handler (user-friendly output)
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(console_formatter)

logging.basicConfig(
    level=logging.DEBUG,
    handlers=[file_handler, console_handler]
)

logger = logging.getLogger(__name__)
logger.info(f"📝 Logging to: {log_file}")


def _mask(secret: str) -> str:
    return f"{secret[:8]}...{secret[-4:]}" if len(secret) > 12 else "***"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle management for the application.

    Initializes services on startup.
    """
    settings = get_settings()

    print("🦸 Initializing Comic Cover...")

    app_logger = init_logger(settings=settings)

    debug_flags = []
    if settings.debug_generation:
        debug_flags.append("Generation polls")
    if settings.debug_api_calls:
        debug_flags.append("API Calls")
    if debug_flags:
        print(f"🐛 Debug logging enabled: {', '.join(debug_flags)}")
        print(f"📊 Debug logs: {settings.debug_log_dir}/")

    # Validate critical environment variables
    print("🔍 Validating environment variables...")
    for name, value in [
        ("REPLICATE_API_TOKEN", settings.replicate_api_token),
        ("OPENAI_API_KEY", settings.openai_api_key),
        ("CLOUDINARY_API_KEY", settings.cloudinary_api_key),
    ]:
        if value:
            print(f"✅ {name}: {_mask(value)}")
        else:
            print(f"❌ {name} is missing! Set it in the .env file")

    replicate_service = ReplicateService(
        api_token=settings.replicate_api_token,
        model=settings.replicate_model,
    )
    generation_service = GenerationService(
        replicate_service,
        policy=PollPolicy(
            interval_seconds=settings.generation_poll_interval_seconds,
            max_attempts=settings.generation_max_poll_attempts,
        ),
        params=GenerationParams.from_settings(settings),
        cc_logger=app_logger,
    )
    print(f"🧠 Image model: {settings.replicate_model} "
          f"(poll every {settings.generation_poll_interval_seconds}s, max {settings.generation_max_poll_attempts})")

    chat = ChatService(api_key=settings.openai_api_key, cc_logger=app_logger)
    cover_service = CoverService(
        chat,
        generation_service,
        name_model=settings.hero_name_model,
        fallback_name_model=settings.hero_name_fallback_model,
        name_temperature=settings.hero_name_temperature,
    )
    dialogue_service = DialogueService(
        chat,
        model=settings.dialogue_model,
        temperature=settings.dialogue_temperature,
    )

    storage_service = CloudinaryStorageService(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        export_folder=settings.cloudinary_export_folder,
        cc_logger=app_logger,
    )

    set_services(
        cover_service=cover_service,
        generation_service=generation_service,
        dialogue_service=dialogue_service,
        storage_service=storage_service,
    )

    print(f"🦸 Comic Cover ready on port {settings.port}!")
    print(f"📚 API Documentation: http://localhost:{settings.port}/docs")

    yield

    print("👋 Shutting down Comic Cover...")
    set_services()


app = FastAPI(
    title="Comic Cover",
    description="""
    Turn a quiz and a selfie into your own superhero comic.

    Features:
    - Issue 01 cover with your face, a generated hero name and your tagline
    - Seven-panel origin story with a rival born from your deepest fear
    - Short comic dialogue per panel
    - Uploads of finished pages
    """,
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
# For production: CORS_ALLOWED_ORIGINS=https://comiccover.app,https://www.comiccover.app
_settings = get_settings()
_cors_origins = (
    ["*"] if _settings.cors_allowed_origins == "*"
    else [origin.strip() for origin in _settings.cors_allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    error_details = []
    for error in errors:
        input_val = error.get('input', 'N/A')
        if isinstance(input_val, str) and len(input_val) > 100:
            input_val = input_val[:100] + "..."
        error_details.append(f"{error['loc']}: {error['msg']} (input: {input_val})")

    logger.error(f"❌ Validation Error on {request.url.path}: " + " | ".join(error_details))

    return JSONResponse(
        status_code=400,
        content={"error": "; ".join(str(e['msg']) for e in errors) or "Invalid request"}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch all unhandled exceptions to prevent server crashes.
    Logs the error and returns a friendly error message.
    """
    error_id = datetime.now().strftime('%Y%m%d_%H%M%S_%f')

    logger.error(f"❌ UNHANDLED EXCEPTION [{error_id}]")
    logger.error(f"   Path: {request.url.path}")
    logger.error(f"   Method: {request.method}")
    logger.error(f"   Error: {type(exc).__name__}: {exc}")
    logger.error(f"   Traceback:\n{traceback.format_exc()}")

    # Use error_id to look up details in server logs
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please try again."
        }
    )


app.include_router(router)


@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "message": "Welcome to Comic Cover!",
        "docs": "/docs",
        "health": "/api/health",
        "version": "1.0.0"
    }


def main():
    """Run the application"""
    settings = get_settings()

    uvicorn.run(
        "comic_cover.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
