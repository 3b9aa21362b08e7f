"""Command-line options and interactive collection of the session context."""

from __future__ import annotations

import argparse
from pathlib import Path
from collections.abc import Callable

from src.session.context import Document, SessionContext

InputFn = Callable[[str], str]

DONE_SENTINEL = "DONE"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli",
        description="Talk to a voice agent grounded in your documents, using the local microphone and speakers.",
    )
    parser.add_argument("--agent-type", default=None, help="Kind of voice agent to create (prompted if omitted).")
    parser.add_argument(
        "--doc",
        action="append",
        default=[],
        metavar="NAME=PATH",
        help="Document to load from a text file. Repeatable; prompted interactively if omitted.",
    )
    parser.add_argument("--model", default=None, help="Override GEMINI_MODEL.")
    parser.add_argument("--voice", default=None, help="Override GEMINI_VOICE.")
    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Never prompt; use only --agent-type and --doc.",
    )
    return parser


def parse_doc_spec(spec: str) -> tuple[str, Path]:
    name, sep, path = spec.partition("=")
    if not sep or not name.strip() or not path.strip():
        raise ValueError(f"--doc expects NAME=PATH, got {spec!r}")
    return name.strip(), Path(path.strip()).expanduser()


def load_documents(specs: list[str]) -> list[Document]:
    documents: list[Document] = []
    for spec in specs:
        name, path = parse_doc_spec(spec)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ValueError(f"cannot read document {name!r} from {path}: {exc}") from exc
        documents.append(Document(name=name, content=content))
    return documents


def prompt_agent_type(input_fn: InputFn = input) -> str:
    return input_fn("What kind of voice agent do you want to create?\n> ").strip()


def prompt_documents(input_fn: InputFn = input, *, print_fn: Callable[[str], None] = print) -> list[Document]:
    """Ask for document contents until the user types DONE; unnamed documents get a numbered name."""
    print_fn("Enter each document's content. Type 'DONE' when finished.")
    documents: list[Document] = []
    while True:
        index = len(documents) + 1
        content = input_fn(f"Document {index} (or 'DONE' to finish):\n> ")
        if content.strip().upper() == DONE_SENTINEL:
            return documents
        name = input_fn("Name for this document: ").strip() or f"Document {index}"
        documents.append(Document(name=name, content=content))
        print_fn(f"Added: {name}")


def collect_context(
    args: argparse.Namespace,
    input_fn: InputFn = input,
    *,
    print_fn: Callable[[str], None] = print,
) -> SessionContext:
    agent_type = (args.agent_type or "").strip()
    if not agent_type and not args.no_prompt:
        agent_type = prompt_agent_type(input_fn)

    documents = load_documents(args.doc)
    if not documents and not args.no_prompt:
        documents = prompt_documents(input_fn, print_fn=print_fn)

    if agent_type:
        return SessionContext(agent_type=agent_type, documents=tuple(documents))
    return SessionContext(documents=tuple(documents))


__all__ = [
    "DONE_SENTINEL",
    "build_parser",
    "collect_context",
    "load_documents",
    "parse_doc_spec",
    "prompt_agent_type",
    "prompt_documents",
]
