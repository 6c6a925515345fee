"""
LiveKit Room Endpoints.
Issue join tokens and manage real-time audio rooms.
"""

import logging
from uuid import uuid4

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.deps import get_room_service
from app.services.livekit import RoomService

logger = logging.getLogger(__name__)

router = APIRouter()


class JoinRoomRequest(BaseModel):
    roomName: str = Field(..., min_length=1)
    participantName: str = Field(..., min_length=1)
    participantIdentity: str = Field(..., min_length=1)


@router.post("/create-test-room")
async def create_test_room(rooms: RoomService = Depends(get_room_service)):
    return await rooms.create_test_room()


@router.get("/rooms")
async def list_rooms(rooms: RoomService = Depends(get_room_service)):
    return {"rooms": await rooms.list_rooms()}


@router.delete("/rooms/{room_name}")
async def delete_room(room_name: str, rooms: RoomService = Depends(get_room_service)):
    await rooms.delete_room(room_name)
    return {"success": True}


@router.post("/create-room")
async def create_room(rooms: RoomService = Depends(get_room_service)):
    """Mint a fresh room name with a creator token."""
    room_name = f"room-{uuid4().hex[:8]}"
    return {
        "roomName": room_name,
        "token": rooms.create_room_token(room_name),
        "wsUrl": rooms.ws_url
    }


@router.post("/join-room")
async def join_room(body: JoinRoomRequest, rooms: RoomService = Depends(get_room_service)):
    token = rooms.create_participant_token(
        body.roomName,
        body.participantName,
        body.participantIdentity
    )
    return {"token": token, "wsUrl": rooms.ws_url}
