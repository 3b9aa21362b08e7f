"""Half-duplex turn state machine.

Capture audio may flow upstream only while the session is connected and the
AI is not speaking. The functions here mutate ``SessionState.turn_status``
and return the side effect the caller must apply (pause or resume capture)
before it handles the next frame. Each effect is returned once per
transition, so repeated chunks or turn-complete markers are no-ops.
"""

from __future__ import annotations

import enum

from src.state.session import TurnStatus, SessionState, ConnectionStatus


class TurnEffect(enum.Enum):
    NONE = "none"
    MUTE = "mute"
    UNMUTE = "unmute"


def on_audio_chunk(state: SessionState) -> TurnEffect:
    if state.turn_status is TurnStatus.AI_RESPONDING:
        return TurnEffect.NONE
    state.turn_status = TurnStatus.AI_RESPONDING
    return TurnEffect.MUTE


def on_turn_complete(state: SessionState) -> TurnEffect:
    if state.turn_status is TurnStatus.IDLE:
        return TurnEffect.NONE
    state.turn_status = TurnStatus.IDLE
    return TurnEffect.UNMUTE


def reset(state: SessionState) -> TurnEffect:
    """Force the idle state after an error or disconnect; capture must never stay muted."""
    return on_turn_complete(state)


def may_forward(state: SessionState) -> bool:
    return state.connection_status is ConnectionStatus.CONNECTED and state.turn_status is TurnStatus.IDLE


__all__ = ["TurnEffect", "may_forward", "on_audio_chunk", "on_turn_complete", "reset"]
