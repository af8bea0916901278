"""Holds the active completion session and the cursor over its candidates."""

from __future__ import annotations

from codeassist.completion.models import CompletionItem, CompletionSession, ItemResult
from codeassist.logging import TRACE, get_logger

log = get_logger("completion")


class RecommendationSessionManager:
    """Owns at most one CompletionSession at a time.

    A new fetch cycle replaces the session wholesale. The active index cycles
    through the candidates; with no candidates it stays at 0 and there is no
    active recommendation.
    """

    def __init__(self) -> None:
        self._session: CompletionSession | None = None
        self._active_index = 0

    @property
    def active_index(self) -> int:
        return self._active_index

    def start_new_session(
        self,
        candidates: list[CompletionItem],
        session_id: str,
        request_start_time: float,
    ) -> CompletionSession:
        """Replace any previous session and reset the cursor."""
        self._session = CompletionSession(
            session_id=session_id,
            candidates=list(candidates),
            request_start_time=request_start_time,
        )
        self._active_index = 0
        log.debug("Started completion session %s with %d candidates", session_id, len(candidates))
        return self._session

    def get_active_session(self) -> CompletionSession | None:
        return self._session

    def get_active_recommendation(self) -> list[CompletionItem]:
        """Single-element list with the active candidate, or empty."""
        if self._session is None or not self._session.candidates:
            return []
        return [self._session.candidates[self._active_index]]

    def increment_active_index(self) -> None:
        self._move(1)

    def decrement_active_index(self) -> None:
        self._move(-1)

    def _move(self, step: int) -> None:
        count = len(self._session.candidates) if self._session else 0
        if count == 0:
            self._active_index = 0
            return
        self._active_index = (self._active_index + step) % count
        log.log(TRACE, "Active completion index -> %d/%d", self._active_index, count)

    def record_result(self, item_id: str, *, accepted: bool) -> ItemResult | None:
        """Record that a candidate was seen, and whether it was accepted.

        Returns:
            The recorded result, or None when there is no session or the item
            does not belong to it.
        """
        if self._session is None or self._session.find(item_id) is None:
            return None
        result = ItemResult(seen=True, accepted=accepted, discarded=False)
        self._session.results[item_id] = result
        return result

    def clear(self) -> None:
        self._session = None
        self._active_index = 0
