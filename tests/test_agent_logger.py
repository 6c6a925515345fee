"""Tests for the Markdown conversation log."""

import pytest

from app.logging.agent_logger import AgentLogger


def test_writes_synchronously_without_loop(tmp_path):
    import asyncio

    log = AgentLogger(str(tmp_path / "log.md"))
    asyncio.run(log.log_system_event("Started", {"version": "1.0.0"}))

    text = (tmp_path / "log.md").read_text()
    assert "**Event:** Started" in text
    assert "- **version:** 1.0.0" in text


@pytest.mark.asyncio
async def test_queued_entries_flush_on_close(tmp_path):
    log = AgentLogger(str(tmp_path / "log.md"))
    await log.initialize_log()
    await log.log_conversation_started("c1", "u1", "Front Desk Call", {"name": "Nursa", "company": "Meadowbrook"}, True)
    await log.log_turn_complete(
        "c1", "Hello", "Hi there", "neutral", ["general"],
        {"total_latency_ms": 120.0, "llm_latency_ms": 80.0, "title_latency_ms": None, "tts_latency_ms": 30.0}
    )
    await log.log_conversation_deleted("c1", 2)
    await log.close()

    text = (tmp_path / "log.md").read_text()
    assert text.startswith("# 🎙️ ConversAI Conversation Log")
    assert "Conversation Started: `c1`" in text
    assert "| LLM | 80ms |" in text
    assert "| Title | N/A |" in text
    assert "**Audio Files Removed:** 2" in text
