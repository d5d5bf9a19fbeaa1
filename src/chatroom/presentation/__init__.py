"""Presentation layer."""

from chatroom.presentation.http_handlers import register_routes

__all__ = ["register_routes"]
