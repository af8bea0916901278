"""Code transformation chat: conversation states, events and the controller."""

from codeassist.transform.controller import TransformController
from codeassist.transform.events import (
    AuthClicked,
    CommandSentFromIDE,
    ErrorThrown,
    FormAction,
    FormActionClicked,
    FormField,
    HILPromptForDependency,
    HILSelectionUploaded,
    HILStartIntervention,
    HumanMessage,
    LinkClicked,
    ProfileChanged,
    TabClosed,
    TabOpened,
    TransformationFinished,
    TransformEvent,
    TransformInitiated,
)
from codeassist.transform.messages import MessageKind, Messenger, OutboundMessage
from codeassist.transform.protocols import AuthProvider, AuthState, IdeActions, TransformJobControl
from codeassist.transform.session import (
    CandidateProject,
    ChatSessionStorage,
    TransformationJob,
    TransformationSession,
)
from codeassist.transform.states import (
    ConversationState,
    JDKVersion,
    TransformObjective,
    can_transition,
    next_states,
)

__all__ = [
    "AuthClicked",
    "AuthProvider",
    "AuthState",
    "CandidateProject",
    "ChatSessionStorage",
    "CommandSentFromIDE",
    "ConversationState",
    "ErrorThrown",
    "FormAction",
    "FormActionClicked",
    "FormField",
    "HILPromptForDependency",
    "HILSelectionUploaded",
    "HILStartIntervention",
    "HumanMessage",
    "IdeActions",
    "JDKVersion",
    "LinkClicked",
    "MessageKind",
    "Messenger",
    "OutboundMessage",
    "ProfileChanged",
    "TabClosed",
    "TabOpened",
    "TransformController",
    "TransformEvent",
    "TransformInitiated",
    "TransformJobControl",
    "TransformObjective",
    "TransformationFinished",
    "TransformationJob",
    "TransformationSession",
    "can_transition",
    "next_states",
]
