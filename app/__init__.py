"""
ConversAI
=========
Customer-service agent backend with spoken replies.

Features:
- Agent personas and a demo call simulator
- Speech synthesis for every agent reply
- Sentiment, intent and title tracking per conversation
- Real-time chat and LiveKit room tokens

Tech Stack:
- FastAPI (async backend)
- SQLAlchemy + aiosqlite (storage)
- OpenAI API (LLM and TTS)
- LiveKit (real-time audio rooms)
"""

__version__ = "1.0.0"
