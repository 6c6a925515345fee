"""
Real-time WebSocket Endpoint.
Carries chat events between the browser and the conversation session.

Every frame is a JSON envelope ``{"event": <name>, "data": <payload>}``.

Client events:
    - start_conversation {userId, agentId?, agentInfo?, isCallSimulator}
    - user_message {conversationId, message, userId?, agentInfo?}
    - ping

Server events:
    - typing (bool)
    - conversation_started {conversationId, welcomeMessage, audioUrl, title}
    - ai_response {message, audioUrl, title, company}
    - error {message}
    - pong
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.config import get_settings
from app.core.exceptions import ConversAIException, ValidationException
from app.core.persona import Persona
from app.core.session import ConversationSessionService

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


async def _emit(websocket: WebSocket, event: str, data: Any = None):
    await websocket.send_json({"event": event, "data": data})


async def _start_conversation(
    sessions: ConversationSessionService,
    data: Dict[str, Any]
):
    is_simulated = bool(data.get("isCallSimulator"))
    agent_id = data.get("agentId")

    persona = None
    if not is_simulated:
        if data.get("agentInfo"):
            persona = Persona.from_agent_info(data["agentInfo"])
        elif agent_id:
            persona = await sessions.persona_for_agent(agent_id)
        else:
            raise ValidationException("agentId or agentInfo is required")

    return await sessions.create(
        user_id=data.get("userId"),
        persona=persona,
        is_simulated=is_simulated,
        agent_id=None if is_simulated else agent_id,
        title=data.get("title")
    )


async def _handle_start(websocket: WebSocket, sessions: ConversationSessionService, data: Dict[str, Any]):
    conversation = await _start_conversation(sessions, data)
    welcome = conversation.public_messages[0]
    await _emit(websocket, "conversation_started", {
        "conversationId": conversation.id,
        "welcomeMessage": welcome.content,
        "audioUrl": welcome.audio_url,
        "title": conversation.title
    })


async def _handle_user_message(websocket: WebSocket, sessions: ConversationSessionService, data: Dict[str, Any]):
    conversation_id = data.get("conversationId")

    if not conversation_id:
        # A first message may carry the persona instead of a prior start event
        if not data.get("agentInfo"):
            raise ValidationException("conversationId is required")
        conversation = await _start_conversation(sessions, data)
        conversation_id = conversation.id
        await _emit(websocket, "conversation_started", {
            "conversationId": conversation_id,
            "welcomeMessage": conversation.public_messages[0].content,
            "audioUrl": conversation.public_messages[0].audio_url,
            "title": conversation.title
        })

    await _emit(websocket, "typing", True)
    try:
        result = await sessions.append_user_message(conversation_id, data.get("message") or "")
    finally:
        await _emit(websocket, "typing", False)

    await _emit(websocket, "ai_response", {
        "conversationId": conversation_id,
        "message": result.reply_text,
        "audioUrl": result.reply_audio_url,
        "title": result.title,
        "company": result.company
    })


@router.websocket("/ws")
async def realtime(websocket: WebSocket):
    """
    Event loop for one browser connection.

    Errors inside an event are reported back as ``error`` events and the
    connection stays open.
    """
    await websocket.accept()
    sessions: ConversationSessionService = websocket.app.state.session_service
    logger.info("WebSocket connected")

    try:
        while True:
            raw = await websocket.receive_text()

            try:
                envelope = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON message: {raw[:200]}")
                await _emit(websocket, "error", {"message": "Invalid message format"})
                continue

            if not isinstance(envelope, dict):
                await _emit(websocket, "error", {"message": "Invalid message format"})
                continue

            event = envelope.get("event")
            data = envelope.get("data") or {}

            try:
                if event == "ping":
                    await _emit(websocket, "pong")
                elif event == "start_conversation":
                    await _handle_start(websocket, sessions, data)
                elif event == "user_message":
                    await _handle_user_message(websocket, sessions, data)
                else:
                    await _emit(websocket, "error", {"message": f"Unknown event: {event}"})
            except ConversAIException as e:
                logger.warning(f"Event {event} failed: {e.message}")
                await _emit(websocket, "error", {"message": e.message, "code": e.error_code})
            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.exception(f"Event {event} failed: {e}")
                await _emit(websocket, "error", {
                    "message": "Failed to process message",
                    "details": str(e) if settings.DEBUG else None
                })

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
