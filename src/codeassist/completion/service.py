"""Recommendation service: runs one paged fetch cycle against the backend."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from codeassist.completion.editor_context import build_completion_request, validate_request
from codeassist.completion.models import (
    CancellationToken,
    CompletionItem,
    CompletionSession,
    DocumentState,
    Position,
    TriggerContext,
)
from codeassist.config.schema import CompletionConfig
from codeassist.logging import get_logger

if TYPE_CHECKING:
    from codeassist.completion.protocols import CompletionClient, SupplementalContextSource
    from codeassist.completion.session_manager import RecommendationSessionManager

log = get_logger("completion")


class RecommendationService:
    """Fetches every page of a completion cycle into one session.

    Pages are requested while the backend returns a continuation token, up to
    ``CompletionConfig.max_pages``. Cancellation is checked before each page.
    A backend error stops paging; whatever arrived before it is still
    installed as the session.
    """

    def __init__(
        self,
        session_manager: RecommendationSessionManager,
        config: CompletionConfig | None = None,
        supplemental_source: SupplementalContextSource | None = None,
    ) -> None:
        self._session_manager = session_manager
        self._config = config or CompletionConfig()
        self._supplemental_source = supplemental_source

    @property
    def session_manager(self) -> RecommendationSessionManager:
        return self._session_manager

    async def get_all_recommendations(
        self,
        client: CompletionClient,
        document: DocumentState,
        position: Position,
        trigger_context: TriggerContext,
        cancel_token: CancellationToken | None = None,
    ) -> CompletionSession | None:
        """Run one fetch cycle.

        Returns:
            The newly installed session, or None when nothing was installed
            (invalid request, cancelled before the first page, first page
            failed, or no candidates).
        """
        request_start_time = time.time()
        request = await build_completion_request(
            document,
            position,
            trigger_context,
            config=self._config,
            supplemental_source=self._supplemental_source,
        )
        if not validate_request(request, self._config):
            log.debug(
                "Skipping completion for %s (%s): request failed validation",
                request.file_context.filename,
                request.file_context.language_name,
            )
            return None

        candidates: list[CompletionItem] = []
        session_id: str | None = None
        pages = 0

        while pages < self._config.max_pages:
            if cancel_token is not None and cancel_token.is_cancelled:
                log.debug("Completion fetch cancelled after %d page(s)", pages)
                break
            try:
                page = await client.fetch_completion_page(request)
            except Exception as e:
                log.warning("Completion page %d failed: %s", pages + 1, e)
                break

            pages += 1
            if session_id is None:
                session_id = page.session_id
            candidates.extend(page.items)

            if not page.next_token:
                break
            request = request.with_token(page.next_token)
        else:
            log.debug("Stopped paging at max_pages=%d", self._config.max_pages)

        if session_id is None or not candidates:
            return None

        return self._session_manager.start_new_session(
            candidates, session_id, request_start_time
        )
