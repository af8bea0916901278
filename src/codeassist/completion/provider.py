"""Inline completion provider and editor command handlers."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from codeassist.completion.models import (
    CancellationToken,
    CompletionItem,
    DocumentState,
    Position,
    TriggerContext,
)
from codeassist.logging import get_logger

if TYPE_CHECKING:
    from codeassist.completion.protocols import (
        CompletionClient,
        EditorSurface,
        ImportAdder,
        ReferenceTracker,
    )
    from codeassist.completion.service import RecommendationService
    from codeassist.completion.session_manager import RecommendationSessionManager

log = get_logger("completion")

LOG_SESSION_RESULTS_METHOD = "aws/logInlineCompletionSessionResults"
ACCEPT_COMMAND = "aws.amazonq.acceptInline"


@dataclass
class AcceptCommand:
    """Arguments the editor passes back when a displayed item is accepted."""

    session_id: str
    item: CompletionItem
    request_start_time: float
    start_line: int
    first_display_latency: float | None

    @property
    def command(self) -> str:
        return ACCEPT_COMMAND


@dataclass
class DisplayedCompletion:
    """A candidate handed to the editor for rendering."""

    item: CompletionItem
    accept: AcceptCommand

    @property
    def insert_text(self) -> str:
        return self.item.insert_text


class InlineCompletionProvider:
    """Serves the active recommendation to the editor.

    A provider created with ``is_new_session=False`` only re-reads the session
    manager; it is used after next/previous to redisplay without fetching.
    """

    def __init__(
        self,
        client: CompletionClient,
        recommendation_service: RecommendationService,
        session_manager: RecommendationSessionManager,
        is_new_session: bool = True,
        reference_tracker: ReferenceTracker | None = None,
        import_adder: ImportAdder | None = None,
    ) -> None:
        self._client = client
        self._recommendation_service = recommendation_service
        self._session_manager = session_manager
        self.is_new_session = is_new_session
        self._reference_tracker = reference_tracker
        self._import_adder = import_adder

    async def provide_inline_completion_items(
        self,
        document: DocumentState,
        position: Position,
        context: TriggerContext,
        token: CancellationToken | None = None,
    ) -> list[DisplayedCompletion]:
        if self.is_new_session:
            await self._recommendation_service.get_all_recommendations(
                self._client, document, position, context, token
            )

        items = self._session_manager.get_active_recommendation()
        session = self._session_manager.get_active_session()
        if session is None or not items:
            return []

        if session.first_display_latency is None:
            session.first_display_latency = time.time() - session.request_start_time

        for item in items:
            if self._reference_tracker is not None:
                self._reference_tracker.set_inline_reference(
                    position.line, item.insert_text, item.references
                )
            if item.missing_imports and self._import_adder is not None:
                await self._import_adder.on_show(document, item, position.line)

        return [
            DisplayedCompletion(
                item=item,
                accept=AcceptCommand(
                    session_id=session.session_id,
                    item=item,
                    request_start_time=session.request_start_time,
                    start_line=position.line,
                    first_display_latency=session.first_display_latency,
                ),
            )
            for item in items
        ]


class InlineCompletionManager:
    """Handles accept, reject, next and previous commands from the editor."""

    def __init__(
        self,
        client: CompletionClient,
        recommendation_service: RecommendationService,
        surface: EditorSurface,
        reference_tracker: ReferenceTracker | None = None,
        import_adder: ImportAdder | None = None,
    ) -> None:
        self._client = client
        self._recommendation_service = recommendation_service
        self._session_manager = recommendation_service.session_manager
        self._surface = surface
        self._reference_tracker = reference_tracker
        self._import_adder = import_adder
        self.provider = InlineCompletionProvider(
            client,
            recommendation_service,
            self._session_manager,
            reference_tracker=reference_tracker,
            import_adder=import_adder,
        )

    @property
    def session_manager(self) -> RecommendationSessionManager:
        return self._session_manager

    def _send_results(
        self, session_id: str, item_id: str, accepted: bool, **extra: Any
    ) -> None:
        result = self._session_manager.record_result(item_id, accepted=accepted)
        outcome = result.to_dict() if result else {
            "seen": True,
            "accepted": accepted,
            "discarded": False,
        }
        params: dict[str, Any] = {
            "sessionId": session_id,
            "completionSessionResult": {item_id: outcome},
        }
        params.update({k: v for k, v in extra.items() if v is not None})
        self._client.send_notification(LOG_SESSION_RESULTS_METHOD, params)

    async def accept(self, command: AcceptCommand) -> None:
        """Record an accepted suggestion and run its follow-ups."""
        item = command.item
        self._send_results(
            command.session_id,
            item.item_id,
            True,
            totalSessionDisplayTime=time.time() - command.request_start_time,
            firstCompletionDisplayLatency=command.first_display_latency,
        )
        # Next query starts a fresh fetch cycle
        self.provider.is_new_session = True

        if item.references and self._reference_tracker is not None:
            self._reference_tracker.add_references(item.insert_text, item.references)
        if item.missing_imports and self._import_adder is not None:
            await self._import_adder.on_accept(item, command.start_line)

    async def reject(self) -> None:
        """Hide the suggestion and record the active item as not accepted."""
        await self._surface.hide_suggestion()
        self.provider.is_new_session = True

        session = self._session_manager.get_active_session()
        active = self._session_manager.get_active_recommendation()
        if session is None or not active:
            return
        self._send_results(session.session_id, active[0].item_id, False)

    async def show_next(self) -> None:
        self._session_manager.increment_active_index()
        await self._redisplay()

    async def show_previous(self) -> None:
        self._session_manager.decrement_active_index()
        await self._redisplay()

    async def _redisplay(self) -> None:
        await self._surface.hide_suggestion()
        self.provider.is_new_session = False
        await self._surface.trigger_suggestion()
