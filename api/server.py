"""FastAPI server for Doppl VTON.

Receives requests from the web front end with:
- subject_photo: Base64 data URL of the user's photo
- garment_photo: Base64 data URL of the garment
- prompt: Optional extra instruction
- model: Optional Gemini model name
- api_key: Optional key (falls back to the stored key, then GEMINI_API_KEY)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from doppl_vton import __version__
from doppl_vton.config import PipelineConfig
from doppl_vton.errors import TryOnError
from doppl_vton.models import GENERATION_PHASES, AnalysisReport, PhaseInfo
from doppl_vton.pipeline import TryOnOrchestrator
from doppl_vton.services import CredentialStore


logger = logging.getLogger("doppl_vton.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the HTTP connection pool on shutdown
    if _orchestrator is not None:
        await _orchestrator.close()


app = FastAPI(
    title="Doppl VTON API",
    description="Virtual try-on with tactile fabric analysis, powered by Gemini",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class TryOnRequest(BaseModel):
    """Request body for try-on generation."""
    subject_photo: str  # Base64 data URL
    garment_photo: str  # Base64 data URL
    prompt: str | None = None
    model: str | None = None
    api_key: str | None = None


class TryOnResponse(BaseModel):
    """Response with generated image and analysis."""
    success: bool
    image: str | None = None  # data URL
    analysis: AnalysisReport | None = None
    error: str | None = None
    error_type: str | None = None


class CredentialRequest(BaseModel):
    api_key: str


# Initialize orchestrator (will be done on first request)
_orchestrator: TryOnOrchestrator | None = None


def get_orchestrator() -> TryOnOrchestrator:
    """Get or create the orchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        config = PipelineConfig()  # Loads from .env automatically via pydantic-settings
        logging.basicConfig(
            level=getattr(logging, config.log_level.upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        _orchestrator = TryOnOrchestrator(config)
    return _orchestrator


def get_credential_store() -> CredentialStore:
    return CredentialStore(get_orchestrator().config.credential_file)


def resolve_api_key(explicit: str | None) -> str:
    """Explicit key, then the stored key, then the environment."""
    if explicit and explicit.strip():
        return explicit
    stored = get_credential_store().load()
    if stored:
        return stored
    return get_orchestrator().config.gemini_api_key or ""


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Doppl VTON API", "version": __version__}


@app.get("/health")
async def health():
    """Detailed health check."""
    orchestrator = get_orchestrator()
    api_key = resolve_api_key(None)
    gemini_ok = bool(api_key) and await orchestrator.gemini.check_connection(api_key)

    return {
        "status": "ok" if gemini_ok else "degraded",
        "credential": "configured" if api_key else "missing",
        "gemini": "connected" if gemini_ok else "disconnected",
        "busy": orchestrator.is_running,
    }


@app.get("/api/phases", response_model=list[PhaseInfo])
async def list_phases():
    """The fixed progress phases, in display order."""
    return list(GENERATION_PHASES)


@app.get("/api/models")
async def list_models():
    config = get_orchestrator().config.gemini
    return {"default": config.model, "models": config.supported_models}


@app.post("/api/credential")
async def save_credential(request: CredentialRequest):
    """Persist the user's API key."""
    if not request.api_key.strip():
        raise HTTPException(status_code=422, detail="api_key must not be empty")
    get_credential_store().save(request.api_key)
    return {"status": "saved"}


@app.delete("/api/credential")
async def clear_credential():
    get_credential_store().clear()
    return {"status": "cleared"}


@app.post("/api/tryon", response_model=TryOnResponse)
async def generate_tryon(request: TryOnRequest):
    """Generate a virtual try-on image with its tactile analysis.

    Only one generation runs at a time; concurrent calls get a 409.
    """
    orchestrator = get_orchestrator()
    if orchestrator.is_running:
        raise HTTPException(status_code=409, detail="A generation is already in progress")

    try:
        result = await orchestrator.generate_from_data_urls(
            subject_photo=request.subject_photo,
            garment_photo=request.garment_photo,
            credential=resolve_api_key(request.api_key),
            model=request.model,
            instruction=request.prompt,
            on_phase=lambda phase: logger.info("Phase: %s", phase.info.label),
        )
    except TryOnError as e:
        return TryOnResponse(
            success=False,
            error=e.user_message(orchestrator.config.locale),
            error_type=e.code,
        )

    return TryOnResponse(
        success=True,
        image=result.image,
        analysis=result.analysis,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
