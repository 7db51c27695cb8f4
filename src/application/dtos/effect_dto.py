from __future__ import annotations

from pydantic import BaseModel, Field

from src.domain.services.voice_effects import EffectChain


class FilterStageModel(BaseModel):
    type: str = Field(..., description="Biquad filter type", examples=["bandpass"])
    frequency: float = Field(..., description="Center or corner frequency in Hz", examples=[1500.0])
    q: float | None = Field(None, description="Quality factor", examples=[4.0])
    gain: float | None = Field(None, description="Gain in dB", examples=[25.0])


class DelayStageModel(BaseModel):
    time: float = Field(..., description="Delay time in seconds", examples=[0.3])
    feedback: float = Field(..., description="Feedback gain", examples=[0.4])
    max_time: float = Field(..., description="Maximum delay time in seconds", examples=[0.5])


class EffectChainResponse(BaseModel):
    """Playback configuration for one voice effect."""
    effect: str = Field(..., description="Effect tag", examples=["chipmunk"])
    playback_rate: float = Field(..., description="Playback rate multiplier", examples=[1.7])
    detune: float = Field(..., description="Detune in cents", examples=[0.0])
    filters: list[FilterStageModel] = Field(default_factory=list, description="Filter stages in order")
    delay: DelayStageModel | None = Field(None, description="Feedback delay stage")

    @classmethod
    def from_entity(cls, chain: EffectChain) -> EffectChainResponse:
        return cls(
            effect=chain.effect.value,
            playback_rate=chain.playback_rate,
            detune=chain.detune,
            filters=[
                FilterStageModel(type=f.type, frequency=f.frequency, q=f.q, gain=f.gain)
                for f in chain.filters
            ],
            delay=(
                DelayStageModel(
                    time=chain.delay.time, feedback=chain.delay.feedback, max_time=chain.delay.max_time
                )
                if chain.delay
                else None
            ),
        )


class ListEffectsResponse(BaseModel):
    effects: list[str] = Field(..., description="Available effect tags", examples=[["none", "chipmunk", "robot"]])
