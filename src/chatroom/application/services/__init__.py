"""Application services."""

from chatroom.application.services.reaper import ReaperLoop
from chatroom.application.services.room_service import JoinResult, RoomService

__all__ = ["JoinResult", "ReaperLoop", "RoomService"]
