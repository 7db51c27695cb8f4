from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from src.application.dtos.effect_dto import EffectChainResponse, ListEffectsResponse
from src.domain.services.voice_effects import VoiceEffect, build_effect_chain

router = APIRouter(
    prefix="/audio",
    tags=["Voice Effects"],
    responses={
        404: {"description": "Not Found - Unknown effect"},
        422: {"description": "Validation Error - Invalid query parameters"},
    },
)


@router.get(
    "/effects",
    response_model=ListEffectsResponse,
    summary="List Voice Effects",
    description="List every voice effect tag the audio panel can apply.",
)
async def list_effects():
    """List voice effect tags."""
    return ListEffectsResponse(effects=[e.value for e in VoiceEffect])


@router.get(
    "/effects/{effect}",
    response_model=EffectChainResponse,
    summary="Get Effect Chain",
    description="""
    Resolve a voice effect to its playback configuration: playback rate,
    detune in cents, filter stages and optional feedback delay.

    `speed` is the base playback rate and `pitch` the base detune; effects
    scale or offset them (e.g. `chipmunk` multiplies the rate by 1.7).
    """,
    response_description="Playback configuration for the audio graph",
)
async def get_effect(
    effect: str,
    speed: float = Query(1.0, gt=0, le=4, description="Base playback rate"),
    pitch: float = Query(0.0, ge=-2400, le=2400, description="Base detune in cents"),
):
    """Get the chain for one effect."""
    try:
        chain = build_effect_chain(effect, speed, pitch)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=f"Unknown effect: {effect}") from e
    return EffectChainResponse.from_entity(chain)
