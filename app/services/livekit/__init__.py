"""
LiveKit room service.
Issues participant tokens and manages real-time audio rooms.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from livekit import api

from app.config import get_settings
from app.core.exceptions import ConfigurationException, RoomServiceException

logger = logging.getLogger(__name__)
settings = get_settings()

TEST_ROOM_NAME = "test-room"


def _strip_scheme(url: str) -> str:
    return re.sub(r"^(wss?://|https?://)", "", url).rstrip("/")


class RoomService:
    """Thin wrapper over the LiveKit server API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        url: Optional[str] = None
    ):
        self.api_key = api_key if api_key is not None else settings.LIVEKIT_API_KEY
        self.api_secret = api_secret if api_secret is not None else settings.LIVEKIT_API_SECRET
        host = _strip_scheme(url if url is not None else settings.LIVEKIT_URL)
        self.ws_url = f"wss://{host}"
        self.http_url = f"https://{host}"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_secret)

    def _require_credentials(self):
        if not self.api_key:
            raise ConfigurationException("LIVEKIT_API_KEY")
        if not self.api_secret:
            raise ConfigurationException("LIVEKIT_API_SECRET")

    def create_participant_token(
        self,
        room_name: str,
        participant_name: str,
        participant_identity: str
    ) -> str:
        """Token allowing a participant to join, publish and subscribe."""
        self._require_credentials()
        return (
            api.AccessToken(self.api_key, self.api_secret)
            .with_identity(participant_identity)
            .with_name(participant_name)
            .with_grants(api.VideoGrants(
                room_join=True,
                room=room_name,
                can_publish=True,
                can_subscribe=True
            ))
            .to_jwt()
        )

    def create_room_token(self, room_name: str) -> str:
        """Token for the room creator, which may also create the room."""
        self._require_credentials()
        return (
            api.AccessToken(self.api_key, self.api_secret)
            .with_identity("room-creator")
            .with_name("Room Creator")
            .with_grants(api.VideoGrants(
                room_create=True,
                room_join=True,
                room=room_name,
                can_publish=True,
                can_subscribe=True
            ))
            .to_jwt()
        )

    def _client(self) -> api.LiveKitAPI:
        self._require_credentials()
        return api.LiveKitAPI(self.http_url, self.api_key, self.api_secret)

    async def create_test_room(self) -> Dict[str, Any]:
        """Create the shared test room (if needed) and return a join token."""
        lk = self._client()
        try:
            await lk.room.create_room(api.CreateRoomRequest(
                name=TEST_ROOM_NAME,
                empty_timeout=10 * 60,
                max_participants=20
            ))
            logger.info(f"Test room '{TEST_ROOM_NAME}' ready")
        except Exception as e:
            if "already exists" not in str(e):
                raise RoomServiceException("create_room", str(e))
            logger.info("Test room already exists, continuing...")
        finally:
            await lk.aclose()

        return {
            "name": TEST_ROOM_NAME,
            "token": self.create_participant_token(TEST_ROOM_NAME, "Test User", "test-user"),
            "wsUrl": self.ws_url
        }

    async def list_rooms(self) -> List[Dict[str, Any]]:
        lk = self._client()
        try:
            response = await lk.room.list_rooms(api.ListRoomsRequest())
        except Exception as e:
            raise RoomServiceException("list_rooms", str(e))
        finally:
            await lk.aclose()

        return [
            {
                "sid": room.sid,
                "name": room.name,
                "numParticipants": room.num_participants,
                "creationTime": room.creation_time
            }
            for room in response.rooms
        ]

    async def delete_room(self, room_name: str):
        lk = self._client()
        try:
            await lk.room.delete_room(api.DeleteRoomRequest(room=room_name))
            logger.info(f"Room {room_name} deleted")
        except Exception as e:
            raise RoomServiceException("delete_room", str(e))
        finally:
            await lk.aclose()
