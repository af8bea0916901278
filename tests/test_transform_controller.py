"""Tests for the transformation chat controller.

Tests coverage for:
- src/codeassist/transform/controller.py
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from codeassist.config import TransformConfig
from codeassist.errors import ErrorKind, TransformError
from codeassist.transform import (
    AuthClicked,
    AuthState,
    CandidateProject,
    ChatSessionStorage,
    ConversationState,
    ErrorThrown,
    FormAction,
    FormActionClicked,
    FormField,
    HILPromptForDependency,
    HILSelectionUploaded,
    HILStartIntervention,
    HumanMessage,
    JDKVersion,
    LinkClicked,
    MessageKind,
    Messenger,
    ProfileChanged,
    TabClosed,
    TabOpened,
    TransformationFinished,
    TransformController,
    TransformInitiated,
    TransformObjective,
)
from codeassist.transform import messages as text
from codeassist.transform.controller import CLEAR_CHAT_COMMAND

from tests.utils import RecordingSink, sct_xml

TAB = "tab-1"
S = ConversationState


# =============================================================================
# Fixtures
# =============================================================================


UPGRADE_PROJECT = CandidateProject.from_path("/ws/billing", java_version="8")
SQL_PROJECT = CandidateProject.from_path("/ws/orders")


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def auth():
    auth = Mock()
    auth.get_auth_state = AsyncMock(return_value=AuthState("connected"))
    return auth


@pytest.fixture
def eligible():
    """Eligible projects per objective; tests may replace entries."""
    return {
        TransformObjective.LANGUAGE_UPGRADE: [UPGRADE_PROJECT],
        TransformObjective.SQL_CONVERSION: [],
    }


@pytest.fixture
def jobs(eligible):
    jobs = Mock()

    async def detect(objective):
        result = eligible[objective]
        if isinstance(result, Exception):
            raise result
        return list(result)

    jobs.detect_eligible_projects = AsyncMock(side_effect=detect)
    jobs.compile_locally = AsyncMock()
    jobs.check_build_file = AsyncMock()
    jobs.start_remote_job = AsyncMock(return_value="job-123")
    jobs.stop_remote_job = AsyncMock()
    jobs.resume_with_dependency = AsyncMock()
    jobs.open_build_log = AsyncMock()
    jobs.open_hil_pom_file = AsyncMock()
    return jobs


@pytest.fixture
def ide():
    ide = Mock()
    ide.pick_file = AsyncMock(return_value=None)
    ide.read_text = AsyncMock(return_value="")
    ide.open_url = AsyncMock()
    ide.execute_command = AsyncMock()
    return ide


@pytest.fixture
def storage() -> ChatSessionStorage:
    return ChatSessionStorage()


@pytest.fixture
def controller(sink, storage, jobs, auth, ide) -> TransformController:
    return TransformController(
        messenger=Messenger(sink),
        storage=storage,
        job_control=jobs,
        auth=auth,
        ide=ide,
        config=TransformConfig(),
    )


def form(action: FormAction, **values: str) -> FormActionClicked:
    return FormActionClicked(
        tab_id=TAB,
        action=action,
        values={FormField[name].value: value for name, value in values.items()},
    )


def upgrade_form(source: str = "8", target: str = "17") -> FormActionClicked:
    return form(
        FormAction.CONFIRM_LANGUAGE_UPGRADE_TRANSFORMATION_FORM,
        LANGUAGE_UPGRADE_PROJECT=UPGRADE_PROJECT.path,
        JDK_FROM=source,
        JDK_TO=target,
    )


async def configure_upgrade(controller, source: str = "8", target: str = "17") -> None:
    """Drive a language upgrade up to the source JAVA_HOME prompt."""
    await controller.handle(TransformInitiated(TAB))
    await controller.handle(upgrade_form(source, target))
    await controller.handle(form(FormAction.CONFIRM_SKIP_TESTS_FORM, SKIP_TESTS=text.SKIP_UNIT_TESTS))
    await controller.handle(form(FormAction.CONTINUE_TRANSFORMATION_FORM))


# =============================================================================
# Starting a transformation
# =============================================================================


class TestTransformInitiated:
    async def test_single_objective_goes_to_project_prompt(self, controller, sink) -> None:
        await controller.handle(TransformInitiated(TAB))

        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION
        assert controller.session.job.objective is TransformObjective.LANGUAGE_UPGRADE
        assert sink.prompts == ["project_list"]
        assert text.TRANSFORMATION_INTRODUCTION in sink.texts
        assert list(controller.session.candidate_projects) == [UPGRADE_PROJECT.path]

    async def test_only_sql_eligible(self, controller, sink, eligible) -> None:
        eligible[TransformObjective.SQL_CONVERSION] = [SQL_PROJECT]
        eligible[TransformObjective.LANGUAGE_UPGRADE] = []

        await controller.handle(TransformInitiated(TAB))

        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION
        assert sink.prompts == ["sql_metadata_file"]

    async def test_both_eligible_asks_for_objective(self, controller, sink, eligible) -> None:
        eligible[TransformObjective.SQL_CONVERSION] = [SQL_PROJECT]

        await controller.handle(TransformInitiated(TAB))

        assert controller.state is S.WAITING_FOR_TRANSFORMATION_OBJECTIVE
        assert sink.texts == [text.CHOOSE_OBJECTIVE]
        assert sink.of_kind(MessageKind.CHAT_INPUT_ENABLED)[-1].payload["enabled"] is True

    async def test_objective_chosen_in_chat(self, controller, sink, eligible) -> None:
        eligible[TransformObjective.SQL_CONVERSION] = [SQL_PROJECT]
        await controller.handle(TransformInitiated(TAB))

        await controller.handle(HumanMessage(TAB, " SQL Conversion "))

        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION
        assert controller.session.job.objective is TransformObjective.SQL_CONVERSION
        assert sink.prompts == ["sql_metadata_file"]

    async def test_unrecognized_objective_reprompts(self, controller, sink, eligible) -> None:
        eligible[TransformObjective.SQL_CONVERSION] = [SQL_PROJECT]
        await controller.handle(TransformInitiated(TAB))

        await controller.handle(HumanMessage(TAB, "make it faster"))

        assert controller.state is S.WAITING_FOR_TRANSFORMATION_OBJECTIVE
        assert sink.texts.count(text.CHOOSE_OBJECTIVE) == 2

    async def test_no_projects_reports_code(self, controller, sink, eligible) -> None:
        eligible[TransformObjective.LANGUAGE_UPGRADE] = TransformError(ErrorKind.NO_MAVEN_PROJECT)

        await controller.handle(TransformInitiated(TAB))

        assert sink.error_codes == ["no-maven-java-project-found"]
        assert controller.state is S.IDLE
        assert sink.prompts == []

    async def test_failing_eligibility_check_counts_as_no_projects(self, controller, eligible) -> None:
        eligible[TransformObjective.SQL_CONVERSION] = RuntimeError("workspace scan failed")

        await controller.handle(TransformInitiated(TAB))

        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION
        assert controller.session.job.objective is TransformObjective.LANGUAGE_UPGRADE

    @pytest.mark.parametrize("state", [S.JOB_SUBMITTED, S.WAITING_FOR_HIL_INPUT])
    async def test_job_in_flight_reports_status(self, controller, sink, jobs, state) -> None:
        controller.session.conversation_state = state

        await controller.handle(TransformInitiated(TAB))

        assert controller.state is state
        jobs.detect_eligible_projects.assert_not_awaited()
        progress = sink.of_kind(MessageKind.ASYNC_PROGRESS)
        assert progress[0].payload["status"] == "job_submission_status"
        assert sink.texts == [text.JOB_SUBMITTED]

    async def test_compiling_reports_status(self, controller, sink) -> None:
        controller.session.conversation_state = S.COMPILING

        await controller.handle(TransformInitiated(TAB))

        assert sink.of_kind(MessageKind.ASYNC_PROGRESS)[0].payload["status"] == "compilation_progress"
        assert sink.texts == [text.COMPILATION_IN_PROGRESS]

    async def test_restart_mid_conversation(self, controller) -> None:
        controller.session.conversation_state = S.PROMPT_TARGET_JAVA_HOME

        await controller.handle(TransformInitiated(TAB))

        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION


class TestAuthGuard:
    async def test_not_connected_stops_flow(self, controller, sink, auth, jobs) -> None:
        auth.get_auth_state.return_value = AuthState("expired")

        await controller.handle(TransformInitiated(TAB))

        needed = sink.of_kind(MessageKind.AUTH_NEEDED)
        assert [m.payload["auth_state"] for m in needed] == ["expired"]
        assert controller.session.is_authenticating is True
        assert controller.state is S.IDLE
        assert sink.prompts == []

    async def test_reconnect_clears_flag(self, controller, auth) -> None:
        auth.get_auth_state.return_value = AuthState("expired")
        await controller.handle(TransformInitiated(TAB))

        auth.get_auth_state.return_value = AuthState("connected")
        await controller.handle(TransformInitiated(TAB))

        assert controller.session.is_authenticating is False
        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION

    async def test_tab_opened_checks_auth(self, controller, sink, auth, storage) -> None:
        auth.get_auth_state.return_value = AuthState("disconnected")

        await controller.handle(TabOpened(TAB))

        assert storage.get_session().tab_id == TAB
        assert len(sink.of_kind(MessageKind.AUTH_NEEDED)) == 1

    async def test_auth_clicked(self, controller, sink, auth) -> None:
        await controller.handle(AuthClicked(TAB, auth_type="idc"))

        auth.handle_auth.assert_called_once_with("idc")
        assert sink.texts == [text.REAUTHENTICATE]
        assert sink.of_kind(MessageKind.CHAT_INPUT_ENABLED)[-1].payload["enabled"] is False

    async def test_expired_after_build_resumes_after_sign_in(
        self, controller, sink, auth, jobs, tmp_path
    ) -> None:
        await configure_upgrade(controller, "17", "17")

        async def expire(job):
            auth.get_auth_state.return_value = AuthState("expired")

        jobs.compile_locally.side_effect = expire
        await controller.handle(HumanMessage(TAB, str(tmp_path)))

        assert controller.state is S.PROMPT_SOURCE_JAVA_HOME
        assert controller.session.is_authenticating is True
        jobs.start_remote_job.assert_not_awaited()
        assert len(sink.of_kind(MessageKind.AUTH_NEEDED)) == 1
        assert sink.of_kind(MessageKind.CHAT_INPUT_ENABLED)[-1].payload["enabled"] is True

        auth.get_auth_state.return_value = AuthState("connected")
        jobs.compile_locally.side_effect = None
        await controller.handle(HumanMessage(TAB, str(tmp_path)))

        assert controller.state is S.JOB_SUBMITTED
        assert controller.session.is_authenticating is False
        jobs.start_remote_job.assert_awaited_once()


# =============================================================================
# Language upgrade
# =============================================================================


class TestLanguageUpgrade:
    async def test_same_jdk_goes_through_compiling_to_submitted(
        self, controller, jobs, storage, tmp_path
    ) -> None:
        await configure_upgrade(controller, "17", "17")
        assert controller.state is S.PROMPT_SOURCE_JAVA_HOME

        seen = []
        jobs.compile_locally.side_effect = lambda job: seen.append(controller.state)
        await controller.handle(HumanMessage(TAB, str(tmp_path)))

        assert seen == [S.COMPILING]
        assert controller.state is S.JOB_SUBMITTED
        job = controller.session.job
        assert job.job_id == "job-123"
        assert job.source_java_home == job.target_java_home == str(tmp_path.resolve())
        assert job.custom_build_command == "clean test-compile"
        assert storage.java_homes[JDKVersion.JDK17] == str(tmp_path.resolve())

    async def test_different_jdk_prompts_for_target(self, controller, sink, tmp_path) -> None:
        source_home = tmp_path / "jdk8"
        target_home = tmp_path / "jdk17"
        source_home.mkdir()
        target_home.mkdir()
        await configure_upgrade(controller, "8", "17")

        await controller.handle(HumanMessage(TAB, str(source_home)))
        assert controller.state is S.PROMPT_TARGET_JAVA_HOME

        await controller.handle(HumanMessage(TAB, str(target_home)))
        assert controller.state is S.JOB_SUBMITTED
        assert controller.session.job.target_java_home == str(target_home.resolve())
        assert sink.prompts.count("java_home") == 2

    async def test_invalid_java_home_keeps_state(self, controller, sink, jobs, tmp_path) -> None:
        await configure_upgrade(controller, "17", "17")

        await controller.handle(HumanMessage(TAB, str(tmp_path / "missing")))

        assert controller.state is S.PROMPT_SOURCE_JAVA_HOME
        assert sink.error_codes[-1] == "invalid-java-home"
        assert sink.of_kind(MessageKind.CHAT_INPUT_ENABLED)[-1].payload["enabled"] is True
        jobs.compile_locally.assert_not_awaited()

    async def test_known_java_home_offered_again(self, controller, sink, storage) -> None:
        storage.java_homes[JDKVersion.JDK8] = "/usr/lib/jvm/java-8"

        await configure_upgrade(controller, "8", "17")

        java_prompt = [m for m in sink.of_kind(MessageKind.PROMPT) if m.payload["prompt"] == "java_home"]
        assert java_prompt[0].payload["current"] == "/usr/lib/jvm/java-8"
        assert any("/usr/lib/jvm/java-8" in t for t in sink.texts)

    async def test_downgrade_rejected(self, controller, sink) -> None:
        await controller.handle(TransformInitiated(TAB))

        await controller.handle(upgrade_form("17", "8"))

        assert sink.error_codes == ["invalid-from-to-jdk"]
        assert "skip_tests" not in sink.prompts

    async def test_run_tests_build_command(self, controller) -> None:
        await controller.handle(TransformInitiated(TAB))
        await controller.handle(upgrade_form())
        await controller.handle(form(FormAction.CONFIRM_SKIP_TESTS_FORM, SKIP_TESTS=text.RUN_UNIT_TESTS))

        assert controller.session.job.custom_build_command == "clean install"

    async def test_compile_failure_resets(self, controller, sink, jobs, tmp_path) -> None:
        await configure_upgrade(controller, "17", "17")
        jobs.compile_locally.side_effect = RuntimeError("mvn exited with 1")

        await controller.handle(HumanMessage(TAB, str(tmp_path)))

        assert sink.error_codes[-1] == "could-not-compile-project"
        assert controller.state is S.IDLE
        jobs.start_remote_job.assert_not_awaited()

    async def test_absolute_path_is_warning_only(self, controller, sink, jobs, tmp_path) -> None:
        await configure_upgrade(controller, "17", "17")
        jobs.check_build_file.side_effect = TransformError(
            ErrorKind.ABSOLUTE_PATH_DETECTED, "pom.xml references /opt/libs/foo.jar"
        )

        await controller.handle(HumanMessage(TAB, str(tmp_path)))

        assert "pom.xml references /opt/libs/foo.jar" in sink.error_texts
        assert controller.state is S.JOB_SUBMITTED

    @pytest.mark.parametrize("kind", [ErrorKind.JOB_START, ErrorKind.MODULE_UPLOAD])
    async def test_job_start_failure_resets(self, controller, sink, jobs, tmp_path, kind) -> None:
        await configure_upgrade(controller, "17", "17")
        jobs.start_remote_job.side_effect = TransformError(kind)

        await controller.handle(HumanMessage(TAB, str(tmp_path)))

        assert controller.state is S.IDLE
        assert text.JOB_START_FAILED in sink.error_texts


class TestCustomVersionsFile:
    VALID = (
        "dependencyManagement:\n"
        "  dependencies:\n"
        "    - identifier: com.example:lib\n"
        "      targetVersion: '2.0'\n"
        "      originType: THIRD_PARTY\n"
    )

    async def select(self, controller) -> None:
        await controller.handle(TransformInitiated(TAB))
        await controller.handle(upgrade_form())
        await controller.handle(form(FormAction.CONFIRM_SKIP_TESTS_FORM, SKIP_TESTS=text.SKIP_UNIT_TESTS))
        await controller.handle(form(FormAction.SELECT_CUSTOM_DEPENDENCY_VERSION_FILE))

    async def test_valid_file(self, controller, sink, ide) -> None:
        ide.pick_file.return_value = "/ws/versions.yaml"
        ide.read_text.return_value = self.VALID

        await self.select(controller)

        assert controller.session.job.custom_versions_file == "/ws/versions.yaml"
        assert text.RECEIVED_VALID_CONFIG_FILE in sink.texts
        assert controller.state is S.PROMPT_SOURCE_JAVA_HOME

    async def test_invalid_file(self, controller, sink, ide) -> None:
        ide.pick_file.return_value = "/ws/versions.yaml"
        ide.read_text.return_value = "dependencyManagement: {}\n"

        await self.select(controller)

        assert sink.error_codes == ["invalid-custom-versions-file"]
        assert sink.prompts.count("custom_versions_file") == 2
        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION

    async def test_unreadable_file_reprompts(self, controller, sink, ide) -> None:
        ide.pick_file.return_value = "/no/such.yaml"
        ide.read_text.side_effect = FileNotFoundError("/no/such.yaml")

        await self.select(controller)

        assert sink.error_codes == ["invalid-custom-versions-file"]
        assert sink.prompts.count("custom_versions_file") == 2
        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION

    async def test_picker_dismissed(self, controller, sink, ide) -> None:
        await self.select(controller)

        ide.read_text.assert_not_awaited()
        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION


# =============================================================================
# SQL conversion
# =============================================================================


class TestSqlConversion:
    @pytest.fixture(autouse=True)
    def sql_only(self, eligible) -> None:
        eligible[TransformObjective.SQL_CONVERSION] = [SQL_PROJECT]
        eligible[TransformObjective.LANGUAGE_UPGRADE] = []

    @pytest.fixture
    def metadata_zip(self, tmp_path: Path) -> str:
        archive = tmp_path / "metadata.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("project.sct", sct_xml(schemas=("hr",)))
        return str(archive)

    async def test_full_flow(self, controller, sink, ide, jobs, metadata_zip) -> None:
        ide.pick_file.return_value = metadata_zip
        await controller.handle(TransformInitiated(TAB))
        await controller.handle(form(FormAction.SELECT_SQL_CONVERSION_METADATA_FILE))

        schema_prompt = sink.of_kind(MessageKind.PROMPT)[-1]
        assert schema_prompt.payload["prompt"] == "sql_project_list"
        assert schema_prompt.payload["schemas"] == ["HR"]
        assert schema_prompt.payload["projects"] == [{"name": "orders", "path": "/ws/orders"}]

        await controller.handle(
            form(
                FormAction.CONFIRM_SQL_CONVERSION_TRANSFORMATION_FORM,
                SQL_CONVERSION_PROJECT="/ws/orders",
                SQL_SCHEMA="HR",
            )
        )

        job = controller.session.job
        assert controller.state is S.JOB_SUBMITTED
        assert job.source_db == "ORACLE"
        assert job.target_db == "AURORA_POSTGRESQL"
        assert job.schema == "HR"
        assert job.metadata_path == metadata_zip
        jobs.start_remote_job.assert_awaited_once_with(job)

    async def test_invalid_metadata_reprompts(self, controller, sink, ide, tmp_path) -> None:
        empty = tmp_path / "empty.zip"
        with zipfile.ZipFile(empty, "w") as zf:
            zf.writestr("notes.txt", "")
        ide.pick_file.return_value = str(empty)
        await controller.handle(TransformInitiated(TAB))

        await controller.handle(form(FormAction.SELECT_SQL_CONVERSION_METADATA_FILE))

        assert sink.error_codes == ["invalid-zip-no-sct-file"]
        assert sink.prompts == ["sql_metadata_file", "sql_metadata_file"]

    async def test_undecodable_sct_reprompts(self, controller, sink, ide, tmp_path) -> None:
        archive = tmp_path / "latin.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("project.sct", b"\xff\xfe<tree/>")
        ide.pick_file.return_value = str(archive)
        await controller.handle(TransformInitiated(TAB))

        await controller.handle(form(FormAction.SELECT_SQL_CONVERSION_METADATA_FILE))

        assert sink.error_codes == ["error-parsing-sct-file"]
        assert sink.prompts == ["sql_metadata_file", "sql_metadata_file"]
        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION

    async def test_picker_dismissed_cancels(self, controller, sink) -> None:
        await controller.handle(TransformInitiated(TAB))

        await controller.handle(form(FormAction.SELECT_SQL_CONVERSION_METADATA_FILE))

        assert controller.state is S.IDLE
        assert sink.texts[-1] == text.JOB_CANCELLED


# =============================================================================
# Running job and human in the loop
# =============================================================================


class TestJobControl:
    async def test_stop_during_hil_returns_to_idle(self, controller, jobs) -> None:
        controller.session.job.job_id = "job-9"
        controller.session.conversation_state = S.WAITING_FOR_HIL_INPUT

        await controller.handle(form(FormAction.STOP_TRANSFORMATION_JOB))

        jobs.stop_remote_job.assert_awaited_once_with("job-9")
        assert controller.state is S.IDLE

    async def test_stop_failure_still_idle(self, controller, sink, jobs) -> None:
        controller.session.conversation_state = S.JOB_SUBMITTED
        jobs.stop_remote_job.side_effect = RuntimeError("backend unavailable")

        await controller.handle(form(FormAction.STOP_TRANSFORMATION_JOB))

        assert controller.state is S.IDLE
        assert "backend unavailable" in sink.error_texts

    async def test_cancel_form(self, controller, sink) -> None:
        await controller.handle(TransformInitiated(TAB))

        await controller.handle(form(FormAction.CANCEL_TRANSFORMATION_FORM))

        assert controller.state is S.IDLE
        assert sink.texts[-1] == text.JOB_CANCELLED

    async def test_finished(self, controller, sink) -> None:
        controller.session.conversation_state = S.JOB_SUBMITTED

        await controller.handle(TransformationFinished(TAB, "Transformation completed."))

        assert controller.state is S.IDLE
        assert sink.texts == ["Transformation completed."]
        assert sink.of_kind(MessageKind.CHAT_INPUT_ENABLED)[-1].payload["enabled"] is False

    async def test_start_new_transformation(self, controller, sink, storage) -> None:
        storage.set_active_tab(TAB)
        old = storage.get_session()

        await controller.handle(form(FormAction.CONFIRM_START_TRANSFORMATION_FLOW))

        assert storage.get_session() is not old
        assert sink.of_kind(MessageKind.COMMAND)[0].payload["command"] == CLEAR_CHAT_COMMAND
        assert controller.state is S.WAITING_FOR_PROJECT_SELECTION

    async def test_view_hub_and_summary(self, controller, ide) -> None:
        await controller.handle(form(FormAction.VIEW_TRANSFORMATION_HUB))
        await controller.handle(form(FormAction.VIEW_SUMMARY))
        assert ide.execute_command.await_count == 2

    async def test_open_build_log(self, controller, sink, jobs) -> None:
        await controller.handle(form(FormAction.OPEN_BUILD_LOG))
        jobs.open_build_log.assert_awaited_once()
        assert sink.texts == [text.VIEW_BUILD_LOG]


class TestHumanInTheLoop:
    async def enter_hil(self, controller) -> None:
        controller.session.conversation_state = S.JOB_SUBMITTED
        await controller.handle(HILStartIntervention(TAB, "<artifactId>log4j</artifactId>"))

    async def test_intervention_and_prompt(self, controller, sink) -> None:
        await self.enter_hil(controller)
        await controller.handle(HILPromptForDependency(TAB, ["2.17.1", "2.20.0"], "1.2.17"))

        assert controller.state is S.WAITING_FOR_HIL_INPUT
        assert "log4j" in sink.texts[0]
        prompt = sink.of_kind(MessageKind.PROMPT)[-1]
        assert prompt.payload["dependencies"] == ["2.17.1", "2.20.0"]
        assert prompt.payload["current_version"] == "1.2.17"

    async def test_confirm_dependency(self, controller, jobs) -> None:
        await self.enter_hil(controller)

        await controller.handle(form(FormAction.CONFIRM_DEPENDENCY_FORM, DEPENDENCY="2.20.0"))

        jobs.resume_with_dependency.assert_awaited_once_with("2.20.0")
        assert controller.state is S.JOB_SUBMITTED

    async def test_cancel_dependency(self, controller, sink, jobs) -> None:
        await self.enter_hil(controller)

        await controller.handle(form(FormAction.CANCEL_DEPENDENCY_FORM))

        jobs.resume_with_dependency.assert_awaited_once_with(None)
        assert text.CONTINUE_WITHOUT_HIL in sink.texts
        assert controller.state is S.JOB_SUBMITTED

    async def test_selection_uploaded(self, controller, sink) -> None:
        await self.enter_hil(controller)
        await controller.handle(HILSelectionUploaded(TAB))
        assert controller.state is S.JOB_SUBMITTED
        assert sink.texts[-1] == text.HIL_RESUME

    async def test_no_alternate_versions_continues(self, controller, sink, jobs) -> None:
        await self.enter_hil(controller)

        await controller.handle(
            ErrorThrown(TAB, TransformError(ErrorKind.ALTERNATE_VERSIONS_NOT_FOUND))
        )

        assert text.DEPENDENCY_VERSIONS_NOT_FOUND in sink.error_texts
        jobs.resume_with_dependency.assert_awaited_once_with(None)
        assert controller.state is S.JOB_SUBMITTED


# =============================================================================
# Errors and tab lifecycle
# =============================================================================


class TestErrors:
    async def test_pre_build_failure(self, controller, sink, jobs) -> None:
        controller.session.conversation_state = S.JOB_SUBMITTED

        await controller.handle(ErrorThrown(TAB, TransformError(ErrorKind.PRE_BUILD)))

        jobs.open_build_log.assert_awaited_once()
        assert text.JOB_FAILED_IN_PRE_BUILD in sink.texts
        statuses = [m.payload["status"] for m in sink.of_kind(MessageKind.ASYNC_PROGRESS)]
        assert statuses == ["job_failed_in_pre_build"]

    async def test_plain_exception_thrown(self, controller, sink) -> None:
        await controller.handle(ErrorThrown(TAB, RuntimeError("socket closed")))
        assert sink.error_texts == ["socket closed"]

    async def test_unexpected_failure_does_not_escape(self, controller, sink, jobs) -> None:
        jobs.open_hil_pom_file.side_effect = OSError("pom.xml missing")

        await controller.handle(form(FormAction.OPEN_FILE))

        assert sink.error_texts == ["pom.xml missing"]

    async def test_unknown_form_action(self, controller, sink) -> None:
        await controller.handle(FormActionClicked(TAB, "somethingElse"))
        assert sink.messages == []


class TestTabs:
    async def test_tab_closed_drops_session(self, controller, storage) -> None:
        await controller.handle(TabOpened(TAB))
        controller.session.conversation_state = S.JOB_SUBMITTED

        await controller.handle(TabClosed(TAB))

        assert not storage.has_session
        assert controller.state is S.IDLE

    async def test_profile_changed(self, controller, storage) -> None:
        await controller.handle(TabOpened(TAB))
        await controller.handle(ProfileChanged())
        assert not storage.has_session

    async def test_link_clicked(self, controller, ide) -> None:
        await controller.handle(LinkClicked(TAB, "https://example.com/docs"))
        ide.open_url.assert_awaited_once_with("https://example.com/docs")
