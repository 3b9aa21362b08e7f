from __future__ import annotations

import pytest

from src.session.store import ContextStore
from src.session.context import DEFAULT_AGENT_TYPE, Document, SessionContext, build_system_instruction


def test_instruction_embeds_each_document_verbatim_in_order() -> None:
    docs = (
        Document("Menu", "Pizza: $10\nPasta: $12"),
        Document("Hours", "  Mon-Fri 9-5  "),
    )
    text = build_system_instruction(SessionContext(agent_type="restaurant host", documents=docs))

    assert "restaurant host" in text
    menu = "=== DOCUMENT: Menu ===\nPizza: $10\nPasta: $12\n=== END DOCUMENT: Menu ==="
    hours = "=== DOCUMENT: Hours ===\n  Mon-Fri 9-5  \n=== END DOCUMENT: Hours ==="
    assert menu in text
    assert hours in text
    assert text.index(menu) < text.index(hours)


def test_instruction_without_documents_or_agent_type() -> None:
    text = build_system_instruction(SessionContext(agent_type="  "))
    assert DEFAULT_AGENT_TYPE in text
    assert "DOCUMENT" not in text


@pytest.mark.asyncio
async def test_context_store_merges_documents_and_agent_type() -> None:
    store = ContextStore()
    assert await store.get("s1") is None

    await store.set_documents("s1", [Document("A", "alpha")])
    context = await store.set_agent_type("s1", "tutor")

    assert context == SessionContext(agent_type="tutor", documents=(Document("A", "alpha"),))
    assert await store.get("s1") == context



@pytest.mark.asyncio
async def test_context_store_agent_type_first_uses_empty_documents() -> None:
    store = ContextStore()
    context = await store.set_agent_type("s2", "coach")
    assert context.documents == ()
