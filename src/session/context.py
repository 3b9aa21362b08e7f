"""Session context and the system instruction built from it."""

from __future__ import annotations

from dataclasses import field, dataclass

DEFAULT_AGENT_TYPE = "general"

_DOC_OPEN = "=== DOCUMENT: {name} ==="
_DOC_CLOSE = "=== END DOCUMENT: {name} ==="


@dataclass(frozen=True, slots=True)
class Document:
    name: str
    content: str


@dataclass(frozen=True, slots=True)
class SessionContext:
    agent_type: str = DEFAULT_AGENT_TYPE
    documents: tuple[Document, ...] = field(default_factory=tuple)


def _render_document(doc: Document) -> str:
    return "\n".join(
        (
            _DOC_OPEN.format(name=doc.name),
            doc.content,
            _DOC_CLOSE.format(name=doc.name),
        )
    )


def build_system_instruction(context: SessionContext) -> str:
    """Render the instruction sent once at session setup.

    Every document's name and full content appear verbatim inside its own
    delimited block, in the order given.
    """
    agent_type = (context.agent_type or "").strip() or DEFAULT_AGENT_TYPE
    lines = [
        f"You are a helpful {agent_type} voice assistant.",
        "Keep spoken answers short and conversational.",
    ]
    if context.documents:
        lines.append("")
        lines.append("Use the following documents as context when answering:")
        for doc in context.documents:
            lines.append("")
            lines.append(_render_document(doc))
    return "\n".join(lines)


__all__ = ["DEFAULT_AGENT_TYPE", "Document", "SessionContext", "build_system_instruction"]
