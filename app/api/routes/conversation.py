"""
Conversation REST Endpoints.
Create conversations, exchange messages, and read conversation data.
"""

import logging
from pathlib import Path
from typing import Optional, List, Dict, Any

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, Field

from app.config import get_settings
from app.core.exceptions import ValidationException
from app.core.session import ConversationSessionService, TurnResult
from app.api.deps import get_session_service

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


class CreateConversationRequest(BaseModel):
    """Request model for starting a conversation."""
    userId: Optional[str] = None
    agentId: Optional[str] = None
    isCallSimulator: bool = False
    title: Optional[str] = None


class AddMessageRequest(BaseModel):
    """Request model for sending a message."""
    content: str = Field(..., min_length=1)
    role: str = "user"


def _turn_response(result: TurnResult) -> Dict[str, Any]:
    return {
        **result.reply.to_dict(),
        "title": result.title,
        "titleUpdated": result.title_updated,
        "sentiment": result.sentiment,
        "intents": result.intents
    }


@router.get("")
async def list_conversations(
    agentId: Optional[str] = None,
    userId: Optional[str] = None,
    sessions: ConversationSessionService = Depends(get_session_service)
) -> List[Dict[str, Any]]:
    """List conversations, newest first."""
    conversations = await sessions.list_conversations(agent_id=agentId, user_id=userId)
    return [c.to_public_dict() for c in conversations]


@router.get("/stats/user/{user_id}")
async def user_stats(
    user_id: str,
    sessions: ConversationSessionService = Depends(get_session_service)
):
    """Practice statistics across one user's conversations."""
    return await sessions.compute_user_stats(user_id)


@router.get("/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    sessions: ConversationSessionService = Depends(get_session_service)
):
    conversation = await sessions.get_conversation(conversation_id)
    return conversation.to_public_dict()


@router.post("", status_code=201)
async def create_conversation(
    body: CreateConversationRequest,
    sessions: ConversationSessionService = Depends(get_session_service)
):
    """
    Start a conversation.

    Call-simulator conversations use the demo front-desk persona; all others
    need the ``agentId`` of a stored agent.
    """
    if not body.userId:
        raise ValidationException("userId is required")

    persona = None
    if not body.isCallSimulator:
        if not body.agentId:
            raise ValidationException("userId and agentId are required")
        persona = await sessions.persona_for_agent(body.agentId)

    conversation = await sessions.create(
        user_id=body.userId,
        persona=persona,
        is_simulated=body.isCallSimulator,
        agent_id=None if body.isCallSimulator else body.agentId,
        title=body.title
    )

    response = conversation.to_public_dict()
    if body.isCallSimulator:
        response["demoAgent"] = sessions.demo_persona.summary()
    return response


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: str,
    sessions: ConversationSessionService = Depends(get_session_service)
):
    """Delete a conversation and its audio files."""
    await sessions.delete_conversation(conversation_id)
    return {"message": "Conversation deleted successfully"}


@router.post("/{conversation_id}/audio")
async def upload_audio(
    conversation_id: str,
    audio: UploadFile = File(...),
    transcript: str = Form(...),
    sessions: ConversationSessionService = Depends(get_session_service)
):
    """
    Accept a recorded user clip with its client-side transcript.

    The clip is stored and attached to the user message; the reply is
    produced exactly as for a typed message.
    """
    if not transcript.strip():
        raise ValidationException("Transcript is required")
    await sessions.get_conversation(conversation_id)

    data = await audio.read()
    suffix = Path(audio.filename or "").suffix or ".webm"
    audio_url = await sessions.audio.save(data, prefix="upload", suffix=suffix)

    try:
        result = await sessions.append_user_message(conversation_id, transcript, audio_url=audio_url)
    except Exception:
        # Nothing references the clip once the turn is rejected
        sessions.audio.delete(audio_url)
        raise
    return {
        "audioUrl": result.reply_audio_url,
        "userAudioUrl": audio_url,
        "message": result.reply_text,
        "title": result.title
    }


@router.get("/{conversation_id}/messages")
async def get_messages(
    conversation_id: str,
    sessions: ConversationSessionService = Depends(get_session_service)
):
    """Messages visible to the customer (system prompt excluded)."""
    messages = await sessions.get_messages(conversation_id)
    return [m.to_dict() for m in messages]


@router.post("/{conversation_id}/messages", status_code=201)
async def add_message(
    conversation_id: str,
    body: AddMessageRequest,
    sessions: ConversationSessionService = Depends(get_session_service)
):
    """Send a user message and receive the agent's reply."""
    if body.role != "user":
        raise ValidationException("Only user messages can be added", details={"role": body.role})

    result = await sessions.append_user_message(conversation_id, body.content)
    return _turn_response(result)


@router.put("/{conversation_id}/end")
async def end_conversation(
    conversation_id: str,
    sessions: ConversationSessionService = Depends(get_session_service)
):
    conversation = await sessions.end_conversation(conversation_id)
    return conversation.to_public_dict()


@router.put("/{conversation_id}/update-title")
async def update_title(
    conversation_id: str,
    sessions: ConversationSessionService = Depends(get_session_service)
):
    title = await sessions.update_title(conversation_id)
    return {
        "success": True,
        "title": title,
        "message": "Conversation title updated successfully"
    }
