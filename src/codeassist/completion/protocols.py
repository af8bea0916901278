"""Collaborator protocols for the inline completion layer.

Implementations live in the editor integration; tests substitute doubles.
"""

from __future__ import annotations

from typing import Any, Protocol

from codeassist.completion.models import (
    CancellationToken,
    CodeReference,
    CompletionItem,
    CompletionPage,
    CompletionRequest,
    DocumentState,
    Position,
    SupplementalContextItem,
)


class CompletionClient(Protocol):
    """Language client connected to the recommendation backend."""

    async def fetch_completion_page(self, request: CompletionRequest) -> CompletionPage:
        """Fetch one page of recommendations.

        Raises:
            Exception: Any transport or backend failure.
        """
        ...

    def send_notification(self, method: str, params: dict[str, Any]) -> None:
        """Send a fire-and-forget notification to the backend."""
        ...


class SupplementalContextSource(Protocol):
    """Gathers workspace snippets related to the document being edited."""

    async def fetch(
        self,
        document: DocumentState,
        position: Position,
        token: CancellationToken,
    ) -> list[SupplementalContextItem]:
        ...


class EditorSurface(Protocol):
    """The editor's inline suggestion widget."""

    async def hide_suggestion(self) -> None:
        ...

    async def trigger_suggestion(self) -> None:
        """Ask the editor to query the provider again."""
        ...


class ReferenceTracker(Protocol):
    """Shows code references of displayed suggestions and records accepted ones."""

    def set_inline_reference(
        self, line: int, insert_text: str, references: list[CodeReference]
    ) -> None:
        """Annotate the displayed suggestion; an empty list clears the annotation."""
        ...

    def add_references(self, insert_text: str, references: list[CodeReference]) -> None:
        ...


class ImportAdder(Protocol):
    """Previews and inserts missing imports of suggestions."""

    async def on_show(self, document: DocumentState, item: CompletionItem, start_line: int) -> None:
        ...

    async def on_accept(self, item: CompletionItem, start_line: int) -> None:
        ...
