"""Data types for inline completion sessions and requests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class TriggerKind(Enum):
    """How an inline completion request was triggered."""

    AUTOMATIC = "automatic"  # Typing
    INVOKE = "invoke"  # Explicit keybinding


@dataclass(frozen=True, slots=True)
class Position:
    """Zero-based cursor position in a document."""

    line: int
    character: int


@dataclass(frozen=True, slots=True)
class TriggerContext:
    """Editor context for a completion request."""

    trigger_kind: TriggerKind = TriggerKind.AUTOMATIC


@dataclass
class DocumentState:
    """Snapshot of an editor document.

    Attributes:
        path: Absolute file system path of the document.
        text: Full document text.
        language_id: Editor language identifier (e.g., "python", "typescriptreact").
        workspace_root: Root of the workspace folder containing the document, if any.
    """

    path: str
    text: str
    language_id: str
    workspace_root: str | None = None

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    def line_at(self, line: int) -> str:
        """Text of a line, without its terminator."""
        lines = self.lines
        if line < 0 or line >= len(lines):
            raise IndexError(f"Line {line} out of range (0..{len(lines) - 1})")
        return lines[line].rstrip("\r")

    def offset_at(self, position: Position) -> int:
        """Character offset of a position, clamped to the document."""
        lines = self.lines
        line = min(max(position.line, 0), len(lines) - 1)
        offset = sum(len(text) + 1 for text in lines[:line])
        return min(offset + max(position.character, 0), offset + len(lines[line]))


@dataclass
class CodeReference:
    """Attribution for a span of suggested code."""

    license_name: str | None = None
    repository: str | None = None
    url: str | None = None
    start: int | None = None  # Span within the insert text
    end: int | None = None


@dataclass
class ImportHint:
    """A missing import the suggestion relies on."""

    statement: str


@dataclass
class CompletionItem:
    """One suggested completion returned by the backend."""

    item_id: str
    insert_text: str
    references: list[CodeReference] = field(default_factory=list)
    missing_imports: list[ImportHint] = field(default_factory=list)


@dataclass
class ItemResult:
    """Outcome of a candidate shown to the user."""

    seen: bool = False
    accepted: bool = False
    discarded: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {"seen": self.seen, "accepted": self.accepted, "discarded": self.discarded}


@dataclass
class CompletionSession:
    """The batch of candidates returned by one fetch cycle.

    Attributes:
        session_id: Backend-issued identifier for the fetch cycle.
        candidates: Candidates in arrival order.
        request_start_time: time.time() when the first page was requested.
        first_display_latency: Seconds from request start to first display.
        results: Recorded outcomes keyed by item id.
    """

    session_id: str
    candidates: list[CompletionItem]
    request_start_time: float
    first_display_latency: float | None = None
    results: dict[str, ItemResult] = field(default_factory=dict)

    def find(self, item_id: str) -> CompletionItem | None:
        for item in self.candidates:
            if item.item_id == item_id:
                return item
        return None


@dataclass
class FileContext:
    """Text around the cursor sent to the backend."""

    filename: str
    language_name: str
    left_file_content: str
    right_file_content: str


@dataclass
class SupplementalContextItem:
    """A workspace snippet that enriches a completion request."""

    file_path: str
    content: str
    score: float | None = None


@dataclass
class CompletionRequest:
    """One page request to the recommendation backend."""

    file_context: FileContext
    editor_state: dict[str, Any] | None
    max_results: int
    trigger_kind: TriggerKind = TriggerKind.AUTOMATIC
    next_token: str | None = None
    supplemental_contexts: list[SupplementalContextItem] = field(default_factory=list)
    allow_code_with_reference: bool = True

    def with_token(self, next_token: str) -> CompletionRequest:
        """Copy of this request asking for the page behind ``next_token``."""
        return replace(self, next_token=next_token)


@dataclass
class CompletionPage:
    """One page of backend results."""

    session_id: str
    items: list[CompletionItem]
    next_token: str | None = None


class CancellationToken:
    """Cooperative cancellation flag shared by the editor and a fetch cycle."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled
