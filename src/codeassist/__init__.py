"""CodeAssist: inline completion sessions and code transformation chat."""

__version__ = "0.1.0"

# Public API
from codeassist.completion import (
    InlineCompletionManager,
    InlineCompletionProvider,
    RecommendationService,
    RecommendationSessionManager,
)
from codeassist.config import Config, get_config, load_config
from codeassist.errors import ErrorKind, TransformError
from codeassist.transform import (
    ChatSessionStorage,
    ConversationState,
    Messenger,
    TransformController,
)

__all__ = [
    # Inline completion
    "InlineCompletionManager",
    "InlineCompletionProvider",
    "RecommendationService",
    "RecommendationSessionManager",
    # Transformation chat
    "ChatSessionStorage",
    "ConversationState",
    "Messenger",
    "TransformController",
    # Errors
    "ErrorKind",
    "TransformError",
    # Config
    "Config",
    "get_config",
    "load_config",
]
