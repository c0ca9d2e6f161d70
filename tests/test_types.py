# Area: Types Tests
"""Tests that the payload TypedDicts describe the sync seams."""

from typing import Iterable, get_type_hints

from gameshow_sync._sync.channel import SyncChannel
from gameshow_sync._sync.inbound_router import SyncCallbacks
from gameshow_sync._sync.presence import PresenceTracker
from gameshow_sync.session import GameSession
from gameshow_sync.types import (
    GameStateDelta,
    PlayerJoinData,
    PresenceDescriptor,
    ScoreEventData,
    VideoParticipant,
)


class TestSignatures:
    """Callback and broadcast parameters use the payload types."""

    def test_callbacks(self):
        assert get_type_hints(SyncCallbacks.on_game_state_update)["delta"] is GameStateDelta
        assert get_type_hints(SyncCallbacks.on_player_join)["data"] is PlayerJoinData
        assert get_type_hints(SyncCallbacks.on_presence)["descriptor"] is PresenceDescriptor

    def test_channel_broadcasts(self):
        assert get_type_hints(SyncChannel.broadcast_game_state)["delta"] is GameStateDelta
        assert get_type_hints(SyncChannel.broadcast_player_join)["data"] is PlayerJoinData
        assert get_type_hints(SyncChannel.track_presence)["descriptor"] is PresenceDescriptor

    def test_presence_and_session(self):
        assert get_type_hints(PresenceTracker.track)["descriptor"] is PresenceDescriptor
        assert get_type_hints(PresenceTracker.host_connected)["video_participants"] == Iterable[VideoParticipant]
        assert get_type_hints(GameSession.own_descriptor)["return"] is PresenceDescriptor
        assert get_type_hints(GameSession.join_game)["data"] is PlayerJoinData


class TestFields:
    def test_score_event_carries_id(self):
        assert "event_id" in ScoreEventData.__annotations__

    def test_deltas_are_partial(self):
        assert GameStateDelta.__total__ is False
        assert PresenceDescriptor.__total__ is False
