"""Outbound chat messages for the transformation conversation.

The controller talks to the chat UI only through ``Messenger``, which turns
each call into an ``OutboundMessage`` and hands it to an async sink supplied
by the UI layer. Rendering (copy, buttons, markdown) belongs to the UI.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from codeassist.transform.session import CandidateProject
from codeassist.transform.states import JDKVersion


class MessageKind(Enum):
    """Category of an outbound message."""

    CHAT = "chat"  # Text in the conversation
    CHAT_INPUT_ENABLED = "chat_input_enabled"
    PLACEHOLDER = "placeholder"
    ASYNC_PROGRESS = "async_progress"
    PROMPT = "prompt"  # Typed form or file prompt
    ERROR_RESPONSE = "error_response"  # Coded failure with remediation
    AUTH_NEEDED = "auth_needed"
    COMMAND = "command"  # Pass-through UI command


class ChatMessageType(Enum):
    ANSWER = "answer"
    PROMPT = "prompt"  # Echo of what the user chose or typed
    AI_PROMPT = "ai-prompt"  # Question to the user


class PromptType(Enum):
    PROJECT_LIST = "project_list"
    SQL_PROJECT_LIST = "sql_project_list"
    SQL_METADATA_FILE = "sql_metadata_file"
    SKIP_TESTS = "skip_tests"
    CUSTOM_VERSIONS_FILE = "custom_versions_file"
    JAVA_HOME = "java_home"
    DEPENDENCY_LIST = "dependency_list"


class ProgressStatus(Enum):
    JOB_SUBMISSION = "job_submission_status"
    COMPILATION = "compilation_progress"
    JOB_FAILED_IN_PRE_BUILD = "job_failed_in_pre_build"


# Chat copy used by the controller
CHOOSE_OBJECTIVE = (
    "I can help you with the following tasks:\n"
    "- Upgrade your Java 8, 11 or 17 code to Java 17 or 21\n"
    "- Convert embedded SQL from Oracle to PostgreSQL\n\n"
    "What would you like to do? Enter 'language upgrade' or 'sql conversion'."
)
CHOOSE_OBJECTIVE_PLACEHOLDER = "Enter 'language upgrade' or 'sql conversion'"
ENTER_JAVA_HOME_PLACEHOLDER = "Enter the path to your JDK"
OPEN_NEW_TAB_PLACEHOLDER = "Open a new tab to chat with the assistant"
TRANSFORMATION_INTRODUCTION = "I'll walk you through setting up the transformation."
REAUTHENTICATE = "Follow instructions to re-authenticate ..."
COMPILATION_IN_PROGRESS = "I'm building your project. This can take up to 10 minutes."
COMPILATION_FINISHED = "I was able to build your project and will start transforming your code."
JOB_SUBMITTED = "I'm starting to transform your code."
JOB_FAILED_IN_PRE_BUILD = "I could not build your project remotely. Review the build log."
JOB_CANCELLED = "I cancelled your transformation."
JOB_START_FAILED = "Something went wrong when starting the transformation. Try again."
DEPENDENCY_VERSIONS_NOT_FOUND = (
    "I couldn't find other versions of this dependency. "
    "I'll continue the transformation without it."
)
CONTINUE_WITHOUT_HIL = "I will continue transforming your code without upgrading this dependency."
CONTINUE_WITHOUT_CONFIG_FILE = "Continuing without a custom dependency versions file."
RECEIVED_VALID_CONFIG_FILE = "I received your custom dependency versions file."
SQL_METADATA_RECEIVED = "I received your metadata file."
HIL_RESUME = "I received your dependency selection and will resume the transformation."
VIEW_BUILD_LOG = "I opened the build log so you can review it."
SKIP_UNIT_TESTS = "Skip unit tests"
RUN_UNIT_TESTS = "Run unit tests"


def java_home_prompt(jdk: JDKVersion | None, current_path: str | None) -> str:
    version = jdk.value if jdk else "?"
    text = f"Enter the path to JDK {version}."
    if current_path:
        text += f"\n\ncurrent:\n\n`{current_path}`"
    return text


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """A message for the chat UI of one tab."""

    kind: MessageKind
    tab_id: str | None
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = 0.0


MessageSink = Callable[[OutboundMessage], Awaitable[None]]


class Messenger:
    """Builds outbound messages and delivers them to the UI sink."""

    def __init__(self, sink: MessageSink) -> None:
        self._sink = sink

    async def _send(self, kind: MessageKind, tab_id: str | None, **payload: Any) -> None:
        await self._sink(
            OutboundMessage(kind=kind, tab_id=tab_id, payload=payload, timestamp=time.time())
        )

    # Text

    async def send_message(
        self,
        text: str,
        tab_id: str | None,
        message_type: ChatMessageType = ChatMessageType.AI_PROMPT,
    ) -> None:
        await self._send(MessageKind.CHAT, tab_id, text=text, type=message_type.value)

    async def send_answer(self, text: str, tab_id: str | None) -> None:
        await self.send_message(text, tab_id, ChatMessageType.ANSWER)

    async def send_chat_input_enabled(self, tab_id: str | None, enabled: bool) -> None:
        await self._send(MessageKind.CHAT_INPUT_ENABLED, tab_id, enabled=enabled)

    async def send_update_placeholder(self, tab_id: str | None, text: str) -> None:
        await self._send(MessageKind.PLACEHOLDER, tab_id, text=text)

    async def send_async_progress(
        self, tab_id: str | None, in_progress: bool, status: ProgressStatus
    ) -> None:
        await self._send(
            MessageKind.ASYNC_PROGRESS, tab_id, in_progress=in_progress, status=status.value
        )

    async def send_command_message(
        self, tab_id: str | None, command: str, payload: dict[str, Any] | None = None
    ) -> None:
        await self._send(MessageKind.COMMAND, tab_id, command=command, data=payload or {})

    # Errors and auth

    async def send_error_response(self, code: str, tab_id: str | None) -> None:
        """Unrecoverable failure for this attempt, rendered from ``code``."""
        await self._send(MessageKind.ERROR_RESPONSE, tab_id, code=code)

    async def send_known_error(self, tab_id: str | None, text: str) -> None:
        await self._send(MessageKind.ERROR_RESPONSE, tab_id, code="known-error", text=text)

    async def send_error_message(self, text: str, tab_id: str | None) -> None:
        await self._send(MessageKind.ERROR_RESPONSE, tab_id, code="error", text=text)

    async def send_auth_needed(self, auth_state: str, tab_id: str | None) -> None:
        await self._send(MessageKind.AUTH_NEEDED, tab_id, auth_state=auth_state)

    # Typed prompts

    async def send_project_prompt(
        self, projects: list[CandidateProject], tab_id: str | None
    ) -> None:
        await self._send(
            MessageKind.PROMPT,
            tab_id,
            prompt=PromptType.PROJECT_LIST.value,
            projects=[{"name": p.name, "path": p.path} for p in projects],
            jdk_versions=[v.value for v in JDKVersion],
        )

    async def send_sql_project_prompt(
        self,
        projects: list[CandidateProject],
        schema_options: list[str],
        tab_id: str | None,
    ) -> None:
        await self._send(
            MessageKind.PROMPT,
            tab_id,
            prompt=PromptType.SQL_PROJECT_LIST.value,
            projects=[{"name": p.name, "path": p.path} for p in projects],
            schemas=list(schema_options),
        )

    async def send_sql_metadata_file_prompt(self, tab_id: str | None) -> None:
        await self._send(MessageKind.PROMPT, tab_id, prompt=PromptType.SQL_METADATA_FILE.value)

    async def send_skip_tests_prompt(self, tab_id: str | None) -> None:
        await self._send(
            MessageKind.PROMPT,
            tab_id,
            prompt=PromptType.SKIP_TESTS.value,
            options=[RUN_UNIT_TESTS, SKIP_UNIT_TESTS],
        )

    async def send_custom_versions_prompt(self, tab_id: str | None) -> None:
        await self._send(
            MessageKind.PROMPT, tab_id, prompt=PromptType.CUSTOM_VERSIONS_FILE.value
        )

    async def send_java_home_prompt(
        self, tab_id: str | None, jdk: JDKVersion | None, current_path: str | None
    ) -> None:
        await self.send_message(java_home_prompt(jdk, current_path), tab_id)
        await self._send(
            MessageKind.PROMPT,
            tab_id,
            prompt=PromptType.JAVA_HOME.value,
            jdk=jdk.value if jdk else None,
            current=current_path,
        )

    async def send_dependency_prompt(
        self,
        tab_id: str | None,
        dependencies: list[str],
        current_version: str | None = None,
    ) -> None:
        await self._send(
            MessageKind.PROMPT,
            tab_id,
            prompt=PromptType.DEPENDENCY_LIST.value,
            dependencies=list(dependencies),
            current_version=current_version,
        )

    # Job status

    async def send_job_submitted(self, tab_id: str | None, failed_in_pre_build: bool = False) -> None:
        text = JOB_FAILED_IN_PRE_BUILD if failed_in_pre_build else JOB_SUBMITTED
        await self.send_answer(text, tab_id)

    async def send_job_finished(self, tab_id: str | None, text: str) -> None:
        await self.send_answer(text, tab_id)
        await self.send_chat_input_enabled(tab_id, False)
