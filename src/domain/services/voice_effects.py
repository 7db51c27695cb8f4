from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class VoiceEffect(str, Enum):
    NONE = "none"
    CHIPMUNK = "chipmunk"
    ROBOT = "robot"
    ECHO = "echo"
    MONSTER = "monster"
    ALIEN = "alien"
    DEEP = "deep"
    RADIO = "radio"


@dataclass(frozen=True)
class FilterStage:
    type: str  # biquad type: lowshelf, peaking, bandpass
    frequency: float
    q: float | None = None
    gain: float | None = None


@dataclass(frozen=True)
class DelayStage:
    time: float  # seconds
    feedback: float
    max_time: float = 0.5


@dataclass(frozen=True)
class EffectChain:
    """Playback configuration for one voice effect; the audio graph is built elsewhere."""

    effect: VoiceEffect
    playback_rate: float
    detune: float  # cents
    filters: tuple[FilterStage, ...] = field(default_factory=tuple)
    delay: DelayStage | None = None


def _none(speed: float, pitch: float) -> EffectChain:
    return EffectChain(VoiceEffect.NONE, speed, pitch)


def _chipmunk(speed: float, pitch: float) -> EffectChain:
    return EffectChain(VoiceEffect.CHIPMUNK, speed * 1.7, pitch)


def _robot(speed: float, pitch: float) -> EffectChain:
    return EffectChain(
        VoiceEffect.ROBOT, speed, pitch, filters=(FilterStage("lowshelf", 1000.0, gain=25.0),)
    )


def _echo(speed: float, pitch: float) -> EffectChain:
    return EffectChain(VoiceEffect.ECHO, speed, pitch, delay=DelayStage(time=0.3, feedback=0.4))


def _monster(speed: float, pitch: float) -> EffectChain:
    return EffectChain(VoiceEffect.MONSTER, speed * 0.7, pitch - 500.0)


def _alien(speed: float, pitch: float) -> EffectChain:
    return EffectChain(
        VoiceEffect.ALIEN,
        speed,
        pitch,
        filters=(FilterStage("peaking", 3500.0, q=20.0, gain=25.0),),
    )


def _deep(speed: float, pitch: float) -> EffectChain:
    return EffectChain(VoiceEffect.DEEP, speed * 0.8, pitch - 800.0)


def _radio(speed: float, pitch: float) -> EffectChain:
    return EffectChain(VoiceEffect.RADIO, speed, pitch, filters=(FilterStage("bandpass", 1500.0, q=4.0),))


EFFECT_BUILDERS: dict[VoiceEffect, Callable[[float, float], EffectChain]] = {
    VoiceEffect.NONE: _none,
    VoiceEffect.CHIPMUNK: _chipmunk,
    VoiceEffect.ROBOT: _robot,
    VoiceEffect.ECHO: _echo,
    VoiceEffect.MONSTER: _monster,
    VoiceEffect.ALIEN: _alien,
    VoiceEffect.DEEP: _deep,
    VoiceEffect.RADIO: _radio,
}


def build_effect_chain(effect: VoiceEffect | str, speed: float = 1.0, pitch: float = 0.0) -> EffectChain:
    """Resolve a voice effect tag to its playback configuration.

    ``speed`` is the base playback rate and ``pitch`` the base detune in cents;
    effects scale or offset them.
    """
    return EFFECT_BUILDERS[VoiceEffect(effect)](float(speed), float(pitch))
