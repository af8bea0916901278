"""Inbound events for the transformation controller.

Every UI or job event is one of the frozen dataclasses below; the union
``TransformEvent`` is what ``TransformController.handle`` accepts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class FormAction(Enum):
    """Buttons rendered in transformation chat forms."""

    CONFIRM_LANGUAGE_UPGRADE_TRANSFORMATION_FORM = "gumbyLanguageUpgradeTransformFormConfirm"
    CONFIRM_SQL_CONVERSION_TRANSFORMATION_FORM = "gumbySQLConversionTransformFormConfirm"
    CANCEL_TRANSFORMATION_FORM = "gumbyTransformFormCancel"
    CONFIRM_SKIP_TESTS_FORM = "gumbyTransformSkipTestsFormConfirm"
    SELECT_SQL_CONVERSION_METADATA_FILE = "gumbySQLConversionMetadataTransformFormConfirm"
    SELECT_CUSTOM_DEPENDENCY_VERSION_FILE = "gumbyCustomDependencyVersionTransformFormConfirm"
    CONTINUE_TRANSFORMATION_FORM = "gumbyTransformFormContinue"
    CONFIRM_DEPENDENCY_FORM = "gumbyTransformDependencyFormConfirm"
    CANCEL_DEPENDENCY_FORM = "gumbyTransformDependencyFormCancel"
    VIEW_TRANSFORMATION_HUB = "gumbyViewTransformationHub"
    VIEW_SUMMARY = "gumbyViewSummary"
    STOP_TRANSFORMATION_JOB = "gumbyStopTransformationJob"
    CONFIRM_START_TRANSFORMATION_FLOW = "gumbyStartTransformation"
    OPEN_FILE = "gumbyOpenFile"
    OPEN_BUILD_LOG = "gumbyOpenBuildLog"

    @classmethod
    def parse(cls, value: str | FormAction) -> FormAction | None:
        if isinstance(value, FormAction):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class FormField(str, Enum):
    """Keys of ``FormActionClicked.values``."""

    LANGUAGE_UPGRADE_PROJECT = "GumbyTransformLanguageUpgradeProjectForm"
    JDK_FROM = "GumbyTransformJdkFromForm"
    JDK_TO = "GumbyTransformJdkToForm"
    SKIP_TESTS = "GumbyTransformSkipTestsForm"
    SQL_CONVERSION_PROJECT = "GumbyTransformSQLConversionProjectForm"
    SQL_SCHEMA = "GumbyTransformSQLSchemaForm"
    DEPENDENCY = "GumbyTransformDependencyForm"


@dataclass(frozen=True)
class TabOpened:
    tab_id: str


@dataclass(frozen=True)
class TabClosed:
    tab_id: str


@dataclass(frozen=True)
class AuthClicked:
    tab_id: str
    auth_type: str = ""


@dataclass(frozen=True)
class TransformInitiated:
    """User invoked /transform (or re-prompt after an unrecognized objective)."""

    tab_id: str


@dataclass(frozen=True)
class FormActionClicked:
    tab_id: str
    action: FormAction | str
    values: dict[str, Any] = field(default_factory=dict)

    def value(self, key: FormField) -> Any:
        return self.values.get(key.value)


@dataclass(frozen=True)
class LinkClicked:
    tab_id: str
    link: str


@dataclass(frozen=True)
class CommandSentFromIDE:
    tab_id: str
    command: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class HumanMessage:
    """Free text typed in the chat input."""

    tab_id: str
    message: str


@dataclass(frozen=True)
class HILStartIntervention:
    tab_id: str
    code_snippet: str = ""


@dataclass(frozen=True)
class HILPromptForDependency:
    tab_id: str
    dependencies: list[str] = field(default_factory=list)
    current_version: str | None = None


@dataclass(frozen=True)
class HILSelectionUploaded:
    tab_id: str


@dataclass(frozen=True)
class ErrorThrown:
    tab_id: str
    error: BaseException


@dataclass(frozen=True)
class TransformationFinished:
    """Job reached a final status (completed, partial, cancelled or failed)."""

    tab_id: str
    message: str | None = None


@dataclass(frozen=True)
class ProfileChanged:
    """The backend region profile changed; the active tab is dropped."""

    tab_id: str = ""


TransformEvent = Union[
    TabOpened,
    TabClosed,
    AuthClicked,
    TransformInitiated,
    FormActionClicked,
    LinkClicked,
    CommandSentFromIDE,
    HumanMessage,
    HILStartIntervention,
    HILPromptForDependency,
    HILSelectionUploaded,
    ErrorThrown,
    TransformationFinished,
    ProfileChanged,
]
