"""Inline completion: session state, request building and paged fetching."""

from codeassist.completion.models import (
    CancellationToken,
    CodeReference,
    CompletionItem,
    CompletionPage,
    CompletionRequest,
    CompletionSession,
    DocumentState,
    FileContext,
    ImportHint,
    ItemResult,
    Position,
    SupplementalContextItem,
    TriggerContext,
    TriggerKind,
)
from codeassist.completion.provider import (
    AcceptCommand,
    DisplayedCompletion,
    InlineCompletionManager,
    InlineCompletionProvider,
)
from codeassist.completion.service import RecommendationService
from codeassist.completion.session_manager import RecommendationSessionManager

__all__ = [
    "AcceptCommand",
    "CancellationToken",
    "CodeReference",
    "CompletionItem",
    "CompletionPage",
    "CompletionRequest",
    "CompletionSession",
    "DisplayedCompletion",
    "DocumentState",
    "FileContext",
    "ImportHint",
    "InlineCompletionManager",
    "InlineCompletionProvider",
    "ItemResult",
    "Position",
    "RecommendationService",
    "RecommendationSessionManager",
    "SupplementalContextItem",
    "TriggerContext",
    "TriggerKind",
]
