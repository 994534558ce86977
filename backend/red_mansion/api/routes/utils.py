from fastapi import APIRouter

from red_mansion.core.config import settings

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/")
async def health_check() -> bool:
    return True


@router.get("/providers/")
async def provider_status() -> dict[str, str | bool]:
    """Which AI providers are configured, without exposing their keys."""
    return {
        "llm_model": settings.MODEL_DEFAULT,
        "llm_configured": bool(settings.LLM_API_KEY or settings.GEMINI_API_KEY),
        "perplexity_configured": settings.perplexity_configured,
        "perplexity_default_model": settings.PERPLEXITY_DEFAULT_MODEL,
    }
