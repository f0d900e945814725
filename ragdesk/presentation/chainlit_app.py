import asyncio
import logging
import uuid

import chainlit as cl

from ragdesk.config.settings import settings
from ragdesk.container import configure_container, container
from ragdesk.core.protocols.embedder import EmbedderProtocol
from ragdesk.core.services.chat_service import ChatService

logging.basicConfig(level=logging.INFO, format="%(message)s")

configure_container(settings)

_SOURCE_PATTERNS = [
    "where did you get",
    "where is that from",
    "what is the source",
    "which document",
    "which documents",
    "did you make that up",
    "source?",
]


def _is_source_question(text: str) -> bool:
    t = (text or "").lower()
    return any(p in t for p in _SOURCE_PATTERNS)


def _format_sources(sources: list[dict]) -> str:
    lines = []
    for s in sources:
        location = s["filename"]
        if s.get("page") is not None:
            location += f" p{s['page']}"
        if s.get("section"):
            location += f" §{s['section']}"
        lines.append(f"- [#{s['id']}] {location}")
    return "\n".join(lines)


@cl.on_chat_start
async def start():
    cl.user_session.set("session_id", uuid.uuid4().hex)
    cl.user_session.set("last_sources", [])

    embedder = container.resolve(EmbedderProtocol)
    if hasattr(embedder, "warmup"):
        await asyncio.to_thread(embedder.warmup)

    await cl.Message(
        content="Hello! Ask me about the uploaded documents and I'll answer "
        "with citations to the passages I used."
    ).send()


@cl.on_message
async def main(message: cl.Message):
    user_input = message.content
    session_id = cl.user_session.get("session_id") or "default"

    if _is_source_question(user_input):
        last_sources = cl.user_session.get("last_sources") or []
        if last_sources:
            content = "The previous answer came from:\n" + _format_sources(last_sources)
        else:
            content = "The previous answer was not based on any document."
        await cl.Message(content=content).send()
        return

    chat_service = container.resolve(ChatService)

    async with cl.Step(name="Searching documents") as step:
        step.input = user_input
        result = await chat_service.handle(
            {"question": user_input, "sessionId": session_id}
        )
        if result.get("success"):
            step.output = f"Found {result.get('searchResults', 0)} candidate passages"
        else:
            step.output = "Search failed"

    if not result.get("success"):
        await cl.Message(content=f"Error: {result.get('error')}").send()
        return

    sources = result.get("sources") or []
    content = result["response"]
    if sources:
        content += "\n\n**Sources**\n" + _format_sources(sources)

    cl.user_session.set("last_sources", sources)
    await cl.Message(content=content).send()
