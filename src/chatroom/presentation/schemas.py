"""Pydantic models for HTTP request bodies."""

from typing import Literal

from pydantic import BaseModel, Field


class JoinRequest(BaseModel):
    """Body of a join request."""

    name: str = Field(min_length=1, description="Name to join with")


class PostMessageRequest(BaseModel):
    """Body of a message post.

    ``status`` is deliberately not an accepted type.
    """

    to: str = Field(min_length=1, description="Recipient name or 'Todos'")
    text: str = Field(min_length=1, description="Message content")
    type: Literal["message", "private_message"]
