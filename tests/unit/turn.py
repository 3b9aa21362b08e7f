from __future__ import annotations

import pytest

from src.realtime import turn
from src.realtime.turn import TurnEffect
from src.state.session import TurnStatus, SessionState, ConnectionStatus


def _connected_state() -> SessionState:
    return SessionState(session_id="s1", connection_status=ConnectionStatus.CONNECTED)


def test_first_chunk_mutes_and_later_chunks_are_noops() -> None:
    state = _connected_state()
    assert turn.on_audio_chunk(state) is TurnEffect.MUTE
    assert state.turn_status is TurnStatus.AI_RESPONDING
    assert turn.on_audio_chunk(state) is TurnEffect.NONE
    assert turn.on_audio_chunk(state) is TurnEffect.NONE


def test_turn_complete_unmutes_once() -> None:
    state = _connected_state()
    turn.on_audio_chunk(state)
    assert turn.on_turn_complete(state) is TurnEffect.UNMUTE
    assert state.turn_status is TurnStatus.IDLE
    assert turn.on_turn_complete(state) is TurnEffect.NONE


def test_turn_complete_while_idle_is_noop() -> None:
    state = _connected_state()
    assert turn.on_turn_complete(state) is TurnEffect.NONE
    assert state.turn_status is TurnStatus.IDLE


def test_reset_forces_idle() -> None:
    state = _connected_state()
    turn.on_audio_chunk(state)
    assert turn.reset(state) is TurnEffect.UNMUTE
    assert state.turn_status is TurnStatus.IDLE
    assert turn.reset(state) is TurnEffect.NONE


@pytest.mark.parametrize(
    ("events", "expected"),
    [
        ("", TurnStatus.IDLE),
        ("c", TurnStatus.AI_RESPONDING),
        ("cct", TurnStatus.IDLE),
        ("ctc", TurnStatus.AI_RESPONDING),
        ("tttc", TurnStatus.AI_RESPONDING),
        ("ccctcct", TurnStatus.IDLE),
    ],
)
def test_responding_iff_chunk_since_last_turn_complete(events: str, expected: TurnStatus) -> None:
    state = _connected_state()
    for kind in events:
        if kind == "c":
            turn.on_audio_chunk(state)
        else:
            turn.on_turn_complete(state)
    assert state.turn_status is expected


@pytest.mark.parametrize(
    ("status", "turn_status", "allowed"),
    [
        (ConnectionStatus.CONNECTED, TurnStatus.IDLE, True),
        (ConnectionStatus.CONNECTED, TurnStatus.AI_RESPONDING, False),
        (ConnectionStatus.CONNECTING, TurnStatus.IDLE, False),
        (ConnectionStatus.CLOSING, TurnStatus.IDLE, False),
        (ConnectionStatus.CLOSED, TurnStatus.IDLE, False),
        (ConnectionStatus.DISCONNECTED, TurnStatus.IDLE, False),
    ],
)
def test_may_forward(status: ConnectionStatus, turn_status: TurnStatus, allowed: bool) -> None:
    state = SessionState(session_id="s1", connection_status=status, turn_status=turn_status)
    assert turn.may_forward(state) is allowed
