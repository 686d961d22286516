"""Real-time document chat over a WebSocket.

Frames are JSON envelopes:
    client -> server  {"event": "chatMessage", "content": "..."}
    server -> client  {"event": "chatMessage", "message": ChatMessage}
                      {"event": "error", "error": "..."}
A plain text frame is treated as the content of a chatMessage.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from app.core.auth_middleware import TokenClaims, extract_bearer, verify_token
from app.core.errors import AuthError, BraintokError
from app.core.logging import get_logger, log_with_context
from app.core.schemas_messages import ChatMessage, ClientChatEvent, ServerChatEvent, ServerErrorEvent
from app.db.messages import save_message_pair
from app.services.rag_service import RAGService
from app.socket import connections

logger = get_logger(__name__)

router = APIRouter()

# Application close codes (4000-4999 are free for application use)
CLOSE_UNAUTHORIZED = 4401
CLOSE_BAD_REQUEST = 4400
CLOSE_INTERNAL_ERROR = 1011

BEARER_SUBPROTOCOL = "bearer"


def _handshake_token(websocket: WebSocket) -> tuple[str | None, str | None]:
    """Find the access token; returns (token, subprotocol to accept with).

    Browsers cannot set headers on a WebSocket, so the token may also come
    as a query parameter or as the second Sec-WebSocket-Protocol entry after
    'bearer'.
    """
    token = extract_bearer(websocket.query_params.get("token"))
    if token:
        return token, None

    token = extract_bearer(websocket.headers.get("authorization"))
    if token:
        return token, None

    protocols = [p.strip() for p in websocket.headers.get("sec-websocket-protocol", "").split(",")]
    if len(protocols) >= 2 and protocols[0].lower() == BEARER_SUBPROTOCOL and protocols[1]:
        return protocols[1], protocols[0]

    return None, None


def _parse_frame(raw: str) -> str:
    """Pull the message content out of a client frame."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return raw.strip()

    if isinstance(data, str):
        return data.strip()
    if not isinstance(data, dict):
        return ""
    try:
        return ClientChatEvent.model_validate(data).content.strip()
    except ValidationError:
        return ""


async def _send_error(websocket: WebSocket, error: str) -> None:
    await websocket.send_json(ServerErrorEvent(error=error).model_dump())


async def handle_chat_message(
    websocket: WebSocket,
    rag: RAGService,
    identity: TokenClaims,
    email: str,
    s3_key: str,
    content: str,
) -> None:
    """Answer one question and persist the exchange."""
    if not content:
        await _send_error(websocket, "Message content is required")
        return

    user_message = ChatMessage(content=content, user_id=email, is_user=True)

    try:
        answer = await rag.query_document(content)
    except Exception:
        log_with_context(
            logger, logging.ERROR, "Error processing chat message",
            user_id=identity.sub, s3_key=s3_key, exc_info=True,
        )
        await _send_error(websocket, "Failed to process message")
        return

    reply = ChatMessage(content=answer, user_id=email, is_user=False)
    await websocket.send_json(ServerChatEvent(message=reply.to_wire()).model_dump())

    try:
        await asyncio.to_thread(save_message_pair, email, s3_key, user_message, reply)
    except BraintokError as e:
        log_with_context(
            logger, logging.ERROR, "Failed to persist chat messages",
            user_id=identity.sub, s3_key=s3_key, error=str(e),
        )

    log_with_context(logger, logging.INFO, "Chat message processed", user_id=identity.sub, s3_key=s3_key)


async def _reject(websocket: WebSocket, subprotocol: str | None, code: int) -> None:
    # Close codes only reach the client once the handshake has completed
    await websocket.accept(subprotocol=subprotocol)
    await websocket.close(code=code)


@router.websocket("/ws/chat")
async def chat_socket(websocket: WebSocket) -> None:
    """Authenticate, then relay questions to a per-connection RAGService."""
    token, subprotocol = _handshake_token(websocket)
    try:
        identity = await asyncio.to_thread(verify_token, token)
    except AuthError as e:
        logger.warning(f"Socket authentication failed: {e}")
        await _reject(websocket, subprotocol, CLOSE_UNAUTHORIZED)
        return

    s3_key = websocket.query_params.get("s3Key")
    email = identity.email or websocket.query_params.get("email")
    if not s3_key or not email:
        logger.warning(f"Socket handshake for {identity.sub} missing s3Key or email")
        await _reject(websocket, subprotocol, CLOSE_BAD_REQUEST)
        return

    await websocket.accept(subprotocol=subprotocol)

    try:
        rag = RAGService(s3_key=s3_key, user_email=email)
    except Exception:
        logger.exception(f"Could not start chat for {s3_key}")
        await _send_error(websocket, "Chat is unavailable for this document")
        await websocket.close(code=CLOSE_INTERNAL_ERROR)
        return

    replaced = connections.register(identity.sub, websocket)
    if replaced is not None:
        logger.info(f"Replacing previous connection for user {identity.sub}")
    logger.info(f"User connected: {identity.sub}")

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text")
            if raw is None:
                await _send_error(websocket, "Binary frames are not supported")
                continue
            await handle_chat_message(websocket, rag, identity, email, s3_key, _parse_frame(raw))
    except WebSocketDisconnect:
        pass
    finally:
        connections.unregister(identity.sub, websocket)
        logger.info(f"User disconnected: {identity.sub}")
