"""
Agent Logger for Markdown Conversation Logs.
Creates a human-readable record of conversations for review and debugging.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _ms(value: Optional[float]) -> str:
    return f"{value:.0f}ms" if value is not None else "N/A"


def _truncate(text: str, limit: int = 500) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class AgentLogger:
    """
    Markdown logger for conversation activity.

    Entries are queued and written by a background task when an event loop
    is running, otherwise appended synchronously.
    """

    def __init__(self, log_path: str = "logs/agent_log.md"):
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        self._queue: asyncio.Queue = asyncio.Queue()
        self._writer_task: Optional[asyncio.Task] = None
        self._running = False

        self._start_writer()

    def _start_writer(self):
        """Start the background log writer."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No event loop, will write synchronously
            return
        self._writer_task = asyncio.create_task(self._write_loop())
        self._running = True

    async def _write_loop(self):
        """Background loop to write logs asynchronously."""
        while self._running:
            try:
                entry = await asyncio.wait_for(self._queue.get(), timeout=1.0)
                self._sync_write(entry)
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break

    def _sync_write(self, entry: str):
        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(entry)
                f.write("\n")
        except OSError as e:
            logger.error(f"Failed to write log: {e}")

    async def _log(self, entry: str):
        """Add a log entry to the queue."""
        if self._running and self._writer_task:
            await self._queue.put(entry)
        else:
            self._sync_write(entry)

    # =========================
    # Public Logging Methods
    # =========================

    async def log_conversation_started(
        self,
        conversation_id: str,
        user_id: str,
        title: str,
        persona: Dict[str, str],
        is_simulated: bool = False
    ):
        """Log the start of a new conversation."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        entry = f"""
---

## 🆕 Conversation Started: `{conversation_id}`

**Timestamp:** {timestamp}
**User:** `{user_id}`
**Title:** {title}
**Agent:** {persona.get('name')} ({persona.get('company')})
**Simulated:** {'yes' if is_simulated else 'no'}

---
"""
        await self._log(entry)

    async def log_turn_complete(
        self,
        conversation_id: str,
        user_text: str,
        agent_text: str,
        sentiment: str,
        intents: List[str],
        metrics: Dict[str, Any]
    ):
        """Log a complete conversation turn with metrics."""
        timestamp = datetime.now().strftime("%H:%M:%S")

        total_latency = metrics.get("total_latency_ms") or 0
        if total_latency < 2000:
            latency_status = "🟢 Fast"
        elif total_latency < 5000:
            latency_status = "🟡 OK"
        else:
            latency_status = "🔴 Slow"

        entry = f"""### ✅ Turn Complete | {timestamp}

**Conversation:** `{conversation_id}`
**User:** "{_truncate(user_text)}"

> {_truncate(agent_text)}

**Sentiment:** {sentiment}
**Intents:** {', '.join(intents) or 'None'}

| Metric | Value |
|--------|-------|
| Total Latency | {latency_status} ({total_latency:.0f}ms) |
| LLM | {_ms(metrics.get('llm_latency_ms'))} |
| Title | {_ms(metrics.get('title_latency_ms'))} |
| TTS | {_ms(metrics.get('tts_latency_ms'))} |

---
"""
        await self._log(entry)

    async def log_title_updated(self, conversation_id: str, old_title: str, new_title: str):
        timestamp = datetime.now().strftime("%H:%M:%S")

        entry = f"""#### 🏷️ Title Updated | {timestamp}

**Conversation:** `{conversation_id}`
**From:** {old_title}
**To:** {new_title}
"""
        await self._log(entry)

    async def log_conversation_deleted(self, conversation_id: str, audio_files_removed: int):
        timestamp = datetime.now().strftime("%H:%M:%S")

        entry = f"""### 🗑️ Conversation Deleted | {timestamp}

**Conversation:** `{conversation_id}`
**Audio Files Removed:** {audio_files_removed}

---
"""
        await self._log(entry)

    async def log_error(
        self,
        conversation_id: str,
        error_type: str,
        error_message: str,
        stack_trace: Optional[str] = None
    ):
        """Log an error."""
        timestamp = datetime.now().strftime("%H:%M:%S")

        entry = f"""### ❌ Error | {timestamp}

**Conversation:** `{conversation_id}`
**Type:** `{error_type}`
**Message:** {error_message}
"""

        if stack_trace:
            entry += f"""
<details>
<summary>Stack Trace</summary>

```
{stack_trace}
```

</details>
"""

        await self._log(entry)

    async def log_system_event(
        self,
        event: str,
        details: Dict[str, Any]
    ):
        """Log a system event."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        details_str = ""
        for key, value in details.items():
            details_str += f"- **{key}:** {value}\n"

        entry = f"""### ⚙️ System Event | {timestamp}

**Event:** {event}

{details_str}
---
"""
        await self._log(entry)

    async def initialize_log(self, app_name: str = "ConversAI", version: str = "1.0.0"):
        """Initialize the log file with header."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        header = f"""# 🎙️ {app_name} Conversation Log

**Generated:** {timestamp}
**Version:** {version}

---

## System Overview

This log records customer-service conversations handled by the agent.

**Turn:** User message → Sentiment & Intents → LLM Reply → Title → TTS

---

## Conversation Log

"""

        with open(self.log_path, "w", encoding="utf-8") as f:
            f.write(header)

        logger.info(f"Agent log initialized: {self.log_path}")

    async def close(self):
        """Close the logger and flush pending entries."""
        self._running = False

        if self._writer_task:
            self._writer_task.cancel()
            try:
                await self._writer_task
            except asyncio.CancelledError:
                pass

        while not self._queue.empty():
            try:
                entry = self._queue.get_nowait()
                self._sync_write(entry)
            except asyncio.QueueEmpty:
                break

        logger.info("Agent logger closed")
