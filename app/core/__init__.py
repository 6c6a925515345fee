"""Core module initialization."""

from app.core.exceptions import (
    ConversAIException,
    NotFoundException,
    ConversationNotFoundException,
    AgentNotFoundException,
    UpstreamUnavailableException,
    LLMException,
    TTSException,
    RoomServiceException,
    ValidationException,
    AuthenticationException,
    StorageException,
    ConfigurationException
)
from app.core.conversation import Conversation, ConversationMetadata, Message
from app.core.persona import Persona, DEMO_PERSONA
from app.core.session import ConversationSessionService, TurnResult

__all__ = [
    "ConversAIException",
    "NotFoundException",
    "ConversationNotFoundException",
    "AgentNotFoundException",
    "UpstreamUnavailableException",
    "LLMException",
    "TTSException",
    "RoomServiceException",
    "ValidationException",
    "AuthenticationException",
    "StorageException",
    "ConfigurationException",
    "Conversation",
    "ConversationMetadata",
    "Message",
    "Persona",
    "DEMO_PERSONA",
    "ConversationSessionService",
    "TurnResult"
]
