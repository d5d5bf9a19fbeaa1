"""HTTP route handlers for the chat room."""

import json
import logging
from typing import Any, TypeVar

from aiohttp import web
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from chatroom.application.services import RoomService
from chatroom.domain.entities import Message, User
from chatroom.domain.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    RoomError,
    ValidationError,
)
from chatroom.presentation.schemas import JoinRequest, PostMessageRequest

logger = logging.getLogger(__name__)

USER_HEADER = "User"

_STATUS_BY_ERROR: dict[type[RoomError], int] = {
    ValidationError: 422,
    ConflictError: 409,
    NotFoundError: 404,
    InternalError: 500,
}

ModelT = TypeVar("ModelT", bound=BaseModel)


@web.middleware
async def error_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    """Map domain errors to JSON error responses."""
    try:
        return await handler(request)
    except RoomError as e:
        status = next(
            (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(e, cls)),
            500,
        )
        logger.debug("%s %s -> %d: %s", request.method, request.path, status, e)
        return web.json_response({"error": str(e)}, status=status)


async def _parse_body(request: web.Request, model: type[ModelT]) -> ModelT:
    """Parse and validate a JSON body.

    Raises:
        ValidationError: If the body is not UTF-8 JSON or does not match the model.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON") from None
    try:
        return model.model_validate(payload)
    except SchemaValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(
            f"'{field}': {first['msg']}" if field else first["msg"], field=field
        ) from None


def _caller(request: web.Request) -> str:
    """Return the caller name from the User header.

    Raises:
        ValidationError: If the header is missing or empty.
    """
    name = request.headers.get(USER_HEADER, "")
    if not name:
        raise ValidationError(f"Missing '{USER_HEADER}' header", field=USER_HEADER)
    return name


def _user_to_json(user: User) -> dict[str, Any]:
    return {"name": user.name}


def _message_to_json(message: Message) -> dict[str, Any]:
    return {
        "sequence": message.sequence,
        "from": message.sender,
        "to": message.to,
        "text": message.text,
        "type": message.type.value,
        "time": message.time,
    }


def register_routes(app: web.Application, room_service: RoomService) -> None:
    """Register chat room routes and the error middleware.

    Args:
        app: aiohttp application (not yet started).
        room_service: Service handling the operations.
    """

    async def handle_join(request: web.Request) -> web.Response:
        body = await _parse_body(request, JoinRequest)
        result = await room_service.join(body.name)
        return web.json_response(
            {"message": "Joined the room", "statusRecorded": result.status_recorded},
            status=201,
        )

    async def handle_list_users(request: web.Request) -> web.Response:
        users = await room_service.list_users()
        return web.json_response([_user_to_json(u) for u in users])

    async def handle_post_message(request: web.Request) -> web.Response:
        sender = _caller(request)
        body = await _parse_body(request, PostMessageRequest)
        message = await room_service.post_message(
            sender, body.to, body.text, body.type
        )
        return web.json_response(_message_to_json(message), status=201)

    async def handle_list_messages(request: web.Request) -> web.Response:
        viewer = request.headers.get(USER_HEADER) or None
        messages = await room_service.list_messages(viewer, request.query.get("limit"))
        return web.json_response([_message_to_json(m) for m in messages])

    async def handle_heartbeat(request: web.Request) -> web.Response:
        await room_service.heartbeat(_caller(request))
        return web.json_response({"message": "OK"})

    app.middlewares.append(error_middleware)
    for path in ("/participants", "/users"):
        app.router.add_post(path, handle_join)
        app.router.add_get(path, handle_list_users)
    app.router.add_post("/messages", handle_post_message)
    app.router.add_get("/messages", handle_list_messages)
    app.router.add_post("/status", handle_heartbeat)
