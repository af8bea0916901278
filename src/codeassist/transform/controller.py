"""Transformation chat controller.

Responds to chat UI and job events by advancing the conversation state,
calling the job collaborators and sending messages back to the UI. All
failures are converted to chat messages here; nothing escapes ``handle``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from codeassist.config.schema import TransformConfig
from codeassist.errors import NO_PROJECT_RESPONSE_CODES, AuthError, ErrorKind, TransformError
from codeassist.logging import get_logger
from codeassist.transform import messages as text
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
from codeassist.transform.files import (
    CUSTOM_VERSIONS_EXTENSIONS,
    SQL_METADATA_EXTENSIONS,
    InvalidFileError,
    extract_java_home,
    parse_sql_metadata,
    read_sct_from_zip,
    validate_custom_versions_file,
)
from codeassist.transform.messages import ChatMessageType, Messenger, ProgressStatus
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
)

if TYPE_CHECKING:
    from codeassist.transform.protocols import AuthProvider, IdeActions, TransformJobControl

log = get_logger("transform")

FOCUS_TRANSFORMATION_HUB_COMMAND = "aws.amazonq.showTransformationHub"
VIEW_SUMMARY_COMMAND = "aws.amazonq.transformationHub.summary.reveal"
CLEAR_CHAT_COMMAND = "aws.awsq.clearchat"


class TransformController:
    """Drives the transformation conversation of the active chat tab.

    Collaborators are injected so tests can substitute doubles:

    Example:
        ```python
        controller = TransformController(
            messenger=Messenger(ui_sink),
            storage=ChatSessionStorage(),
            job_control=backend_jobs,
            auth=auth_provider,
            ide=ide_actions,
        )
        await controller.handle(TransformInitiated(tab_id="tab-1"))
        ```
    """

    def __init__(
        self,
        messenger: Messenger,
        storage: ChatSessionStorage,
        job_control: TransformJobControl,
        auth: AuthProvider,
        ide: IdeActions,
        config: TransformConfig | None = None,
    ) -> None:
        self._messenger = messenger
        self._storage = storage
        self._jobs = job_control
        self._auth = auth
        self._ide = ide
        self._config = config or TransformConfig()

        self._handlers: dict[type, Callable[[Any], Awaitable[None]]] = {
            TabOpened: self._tab_opened,
            TabClosed: self._tab_closed,
            ProfileChanged: self._tab_closed,
            AuthClicked: self._auth_clicked,
            CommandSentFromIDE: self._command_sent_from_ide,
            LinkClicked: self._link_clicked,
            TransformInitiated: self._transform_initiated,
            FormActionClicked: self._form_action_clicked,
            HumanMessage: self._human_message,
            HILStartIntervention: self._hil_start_intervention,
            HILPromptForDependency: self._hil_prompt_for_dependency,
            HILSelectionUploaded: self._hil_selection_uploaded,
            ErrorThrown: self._error_thrown,
            TransformationFinished: self._transformation_finished,
        }
        self._form_handlers: dict[FormAction, Callable[[FormActionClicked], Awaitable[None]]] = {
            FormAction.CONFIRM_LANGUAGE_UPGRADE_TRANSFORMATION_FORM: self._confirm_language_upgrade,
            FormAction.CANCEL_TRANSFORMATION_FORM: self._cancel_transformation_form,
            FormAction.CONFIRM_SKIP_TESTS_FORM: self._confirm_skip_tests,
            FormAction.CONFIRM_SQL_CONVERSION_TRANSFORMATION_FORM: self._confirm_sql_conversion,
            FormAction.SELECT_SQL_CONVERSION_METADATA_FILE: self._select_sql_metadata_file,
            FormAction.SELECT_CUSTOM_DEPENDENCY_VERSION_FILE: self._select_custom_versions_file,
            FormAction.CONTINUE_TRANSFORMATION_FORM: self._continue_without_config_file,
            FormAction.VIEW_TRANSFORMATION_HUB: self._view_transformation_hub,
            FormAction.VIEW_SUMMARY: self._view_summary,
            FormAction.STOP_TRANSFORMATION_JOB: self._stop_transformation_job,
            FormAction.CONFIRM_START_TRANSFORMATION_FLOW: self._start_new_transformation,
            FormAction.CONFIRM_DEPENDENCY_FORM: self._confirm_dependency,
            FormAction.CANCEL_DEPENDENCY_FORM: self._cancel_dependency,
            FormAction.OPEN_FILE: self._open_hil_file,
            FormAction.OPEN_BUILD_LOG: self._open_build_log,
        }

    @property
    def session(self) -> TransformationSession:
        return self._storage.get_session()

    @property
    def state(self) -> ConversationState:
        return self.session.conversation_state

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def handle(self, event: TransformEvent) -> None:
        """Dispatch one inbound event to its handler."""
        handler = self._handlers.get(type(event))
        if handler is None:
            log.warning("No handler for event %s", type(event).__name__)
            return

        log.debug("Handling %s in state %s", type(event).__name__, self.state.name)
        try:
            await handler(event)
        except Exception as e:
            await self._report_failure(e, event.tab_id or self.session.tab_id)

    async def _report_failure(self, error: Exception, tab_id: str | None) -> None:
        try:
            if isinstance(error, TransformError):
                await self._handle_transform_error(error, tab_id)
            else:
                log.error("Unexpected transformation error: %s", error, exc_info=error)
                await self._messenger.send_error_message(str(error), tab_id)
        except Exception:
            log.exception("Failed to report transformation error %r", error)

    def _set_state(self, target: ConversationState) -> None:
        session = self.session
        source = session.conversation_state
        if not can_transition(source, target):
            log.warning("Unexpected transition %s -> %s", source.name, target.name)
        elif source != target:
            log.debug("Conversation state %s -> %s", source.name, target.name)
        session.conversation_state = target

    async def _require_auth(self) -> None:
        """Auth guard before backend work.

        Raises:
            AuthError: When not connected; the failure handler flags the
                session and asks the user to re-authenticate.
        """
        auth_state = await self._auth.get_auth_state()
        if not auth_state.connected:
            raise AuthError(auth_state.state)
        self.session.is_authenticating = False

    # -------------------------------------------------------------------------
    # Tabs, auth and pass-through events
    # -------------------------------------------------------------------------

    async def _tab_opened(self, event: TabOpened) -> None:
        tab_id = self._storage.set_active_tab(event.tab_id)
        log.debug("Transformation session active in tab %s", tab_id)
        await self._require_auth()

    async def _tab_closed(self, event: TabClosed | ProfileChanged) -> None:
        self._storage.remove_active_tab()

    async def _auth_clicked(self, event: AuthClicked) -> None:
        self._auth.handle_auth(event.auth_type)
        await self._messenger.send_answer(text.REAUTHENTICATE, event.tab_id)
        # The user must finish re-authentication before chatting again
        await self._messenger.send_chat_input_enabled(event.tab_id, False)

    async def _command_sent_from_ide(self, event: CommandSentFromIDE) -> None:
        await self._messenger.send_command_message(event.tab_id, event.command, event.payload)

    async def _link_clicked(self, event: LinkClicked) -> None:
        await self._ide.open_url(event.link)

    # -------------------------------------------------------------------------
    # Starting a transformation
    # -------------------------------------------------------------------------

    async def _transform_initiated(self, event: TransformInitiated) -> None:
        tab_id = event.tab_id
        state = self.state
        if state.job_in_flight:
            await self._send_in_flight_status(tab_id, state)
            return
        if state != ConversationState.IDLE:
            # Re-invoking mid-conversation restarts it
            self._set_state(ConversationState.IDLE)

        sql_projects = await self._probe_projects(TransformObjective.SQL_CONVERSION)
        if not sql_projects:
            await self._begin_flow(TransformObjective.LANGUAGE_UPGRADE, tab_id)
            return

        upgrade_projects = await self._probe_projects(TransformObjective.LANGUAGE_UPGRADE)
        if not upgrade_projects:
            await self._begin_flow(TransformObjective.SQL_CONVERSION, tab_id)
            return

        self._set_state(ConversationState.WAITING_FOR_TRANSFORMATION_OBJECTIVE)
        await self._messenger.send_message(text.CHOOSE_OBJECTIVE, tab_id)
        await self._messenger.send_chat_input_enabled(tab_id, True)
        await self._messenger.send_update_placeholder(tab_id, text.CHOOSE_OBJECTIVE_PLACEHOLDER)

    async def _send_in_flight_status(self, tab_id: str, state: ConversationState) -> None:
        if state == ConversationState.COMPILING:
            await self._messenger.send_async_progress(tab_id, True, ProgressStatus.COMPILATION)
            await self._messenger.send_answer(text.COMPILATION_IN_PROGRESS, tab_id)
        else:
            await self._messenger.send_async_progress(tab_id, True, ProgressStatus.JOB_SUBMISSION)
            await self._messenger.send_job_submitted(tab_id)

    async def _probe_projects(self, objective: TransformObjective) -> list[CandidateProject]:
        """Silent eligibility probe; a failing probe counts as no projects."""
        try:
            return await self._jobs.detect_eligible_projects(objective)
        except Exception as e:
            log.error("Error validating %s projects: %s", objective.value, e)
            return []

    async def _begin_flow(self, objective: TransformObjective, tab_id: str) -> None:
        await self._require_auth()
        await self._messenger.send_answer(text.TRANSFORMATION_INTRODUCTION, tab_id)

        projects = await self._validate_projects(objective, tab_id)
        if not projects:
            return

        session = self.session
        session.job = TransformationJob(objective=objective)
        session.update_candidate_projects(projects)
        self._set_state(ConversationState.WAITING_FOR_PROJECT_SELECTION)
        if objective == TransformObjective.LANGUAGE_UPGRADE:
            await self._messenger.send_project_prompt(projects, tab_id)
        else:
            await self._messenger.send_sql_metadata_file_prompt(tab_id)

    async def _validate_projects(
        self, objective: TransformObjective, tab_id: str
    ) -> list[CandidateProject]:
        try:
            return await self._jobs.detect_eligible_projects(objective)
        except TransformError as e:
            if not e.kind.is_no_projects:
                raise
            await self._messenger.send_error_response(NO_PROJECT_RESPONSE_CODES[e.kind], tab_id)
            return []

    # -------------------------------------------------------------------------
    # Chat input
    # -------------------------------------------------------------------------

    async def _human_message(self, event: HumanMessage) -> None:
        tab_id = event.tab_id
        await self._messenger.send_message(event.message, tab_id, ChatMessageType.PROMPT)
        await self._messenger.send_chat_input_enabled(tab_id, False)
        await self._messenger.send_update_placeholder(tab_id, text.OPEN_NEW_TAB_PLACEHOLDER)

        state = self.state
        if state == ConversationState.PROMPT_SOURCE_JAVA_HOME:
            await self._receive_source_java_home(event.message, tab_id)
        elif state == ConversationState.PROMPT_TARGET_JAVA_HOME:
            await self._receive_target_java_home(event.message, tab_id)
        elif state == ConversationState.WAITING_FOR_TRANSFORMATION_OBJECTIVE:
            objective = TransformObjective.parse(event.message)
            if objective is None:
                # Keep asking until the answer is one of the objectives
                await self._transform_initiated(TransformInitiated(tab_id=tab_id))
            else:
                await self._begin_flow(objective, tab_id)
        else:
            log.debug("Ignoring chat message in state %s", state.name)

    async def _receive_source_java_home(self, message: str, tab_id: str) -> None:
        java_home = extract_java_home(message)
        if java_home is None:
            await self._reject_java_home(tab_id)
            return

        job = self.session.job
        job.source_java_home = java_home
        if job.source_jdk is not None:
            self._storage.java_homes[job.source_jdk] = java_home

        if job.target_jdk == job.source_jdk:
            job.target_java_home = java_home
            await self._prepare_language_upgrade(tab_id)
        else:
            await self._prompt_java_home("target", tab_id)

    async def _receive_target_java_home(self, message: str, tab_id: str) -> None:
        java_home = extract_java_home(message)
        if java_home is None:
            await self._reject_java_home(tab_id)
            return

        job = self.session.job
        job.target_java_home = java_home
        if job.target_jdk is not None:
            self._storage.java_homes[job.target_jdk] = java_home
        await self._prepare_language_upgrade(tab_id)

    async def _reject_java_home(self, tab_id: str) -> None:
        await self._messenger.send_error_response("invalid-java-home", tab_id)
        await self._messenger.send_chat_input_enabled(tab_id, True)
        await self._messenger.send_update_placeholder(tab_id, text.ENTER_JAVA_HOME_PLACEHOLDER)

    async def _prompt_java_home(self, which: str, tab_id: str) -> None:
        job = self.session.job
        if which == "source":
            self._set_state(ConversationState.PROMPT_SOURCE_JAVA_HOME)
            jdk = job.source_jdk
        else:
            self._set_state(ConversationState.PROMPT_TARGET_JAVA_HOME)
            jdk = job.target_jdk
        current = self._storage.java_homes.get(jdk) if jdk is not None else None
        await self._messenger.send_java_home_prompt(tab_id, jdk, current)
        await self._messenger.send_chat_input_enabled(tab_id, True)
        await self._messenger.send_update_placeholder(tab_id, text.ENTER_JAVA_HOME_PLACEHOLDER)

    # -------------------------------------------------------------------------
    # Language upgrade forms
    # -------------------------------------------------------------------------

    async def _form_action_clicked(self, event: FormActionClicked) -> None:
        action = FormAction.parse(event.action)
        handler = self._form_handlers.get(action) if action else None
        if handler is None:
            log.warning("Unknown form action %r", event.action)
            return
        await handler(event)

    async def _confirm_language_upgrade(self, event: FormActionClicked) -> None:
        tab_id = event.tab_id
        project_path = event.value(FormField.LANGUAGE_UPGRADE_PROJECT) or ""
        try:
            source = JDKVersion.parse(event.value(FormField.JDK_FROM))
            target = JDKVersion.parse(event.value(FormField.JDK_TO))
        except ValueError:
            await self._messenger.send_error_response("invalid-from-to-jdk", tab_id)
            return

        job = self.session.job
        job.objective = TransformObjective.LANGUAGE_UPGRADE
        job.project_path = project_path
        await self._messenger.send_message(
            f"Project: {job.project_name}, JDK {source.value} -> JDK {target.value}",
            tab_id,
            ChatMessageType.PROMPT,
        )

        if target.number < source.number:
            await self._messenger.send_error_response("invalid-from-to-jdk", tab_id)
            return

        job.source_jdk = source
        job.target_jdk = target
        await self._messenger.send_skip_tests_prompt(tab_id)

    async def _confirm_skip_tests(self, event: FormActionClicked) -> None:
        selection = event.value(FormField.SKIP_TESTS) or text.RUN_UNIT_TESTS
        if selection == text.SKIP_UNIT_TESTS:
            command = self._config.skip_tests_build_command
        else:
            command = self._config.run_tests_build_command
        self.session.job.custom_build_command = command
        await self._messenger.send_message(selection, event.tab_id, ChatMessageType.PROMPT)
        await self._messenger.send_custom_versions_prompt(event.tab_id)

    async def _select_custom_versions_file(self, event: FormActionClicked) -> None:
        tab_id = event.tab_id
        path = await self._ide.pick_file("Select", CUSTOM_VERSIONS_EXTENSIONS)
        if not path:
            return

        try:
            contents = await self._ide.read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            log.info("Cannot read custom versions file %s: %s", path, e)
            contents = None
        if contents is None or not validate_custom_versions_file(contents):
            await self._messenger.send_error_response("invalid-custom-versions-file", tab_id)
            await self._messenger.send_custom_versions_prompt(tab_id)
            return

        await self._messenger.send_message(text.RECEIVED_VALID_CONFIG_FILE, tab_id)
        self.session.job.custom_versions_file = path
        await self._prompt_java_home("source", tab_id)

    async def _continue_without_config_file(self, event: FormActionClicked) -> None:
        await self._messenger.send_message(text.CONTINUE_WITHOUT_CONFIG_FILE, event.tab_id)
        self.session.job.custom_versions_file = None
        await self._prompt_java_home("source", event.tab_id)

    async def _prepare_language_upgrade(self, tab_id: str) -> None:
        job = self.session.job
        prompt = "source" if self.state == ConversationState.PROMPT_SOURCE_JAVA_HOME else "target"
        self._set_state(ConversationState.COMPILING)
        await self._messenger.send_answer(text.COMPILATION_IN_PROGRESS, tab_id)
        try:
            await self._jobs.compile_locally(job)
        except Exception as e:
            log.error("Local build failed: %s", e)
            await self._messenger.send_error_response("could-not-compile-project", tab_id)
            # Reset so "start a new transformation" works
            self._set_state(ConversationState.IDLE)
            return

        await self._messenger.send_answer(text.COMPILATION_FINISHED, tab_id)

        # The build may take long enough for credentials to expire; the user
        # re-sends the JAVA_HOME after signing in again
        try:
            await self._require_auth()
        except AuthError as e:
            await self._handle_transform_error(e, tab_id)
            await self._prompt_java_home(prompt, tab_id)
            return

        try:
            await self._jobs.check_build_file(job)
        except TransformError as e:
            if e.kind != ErrorKind.ABSOLUTE_PATH_DETECTED:
                raise
            await self._messenger.send_known_error(tab_id, e.detail or str(e))

        await self._submit_job(tab_id)

    async def _submit_job(self, tab_id: str) -> None:
        job = self.session.job
        await self._messenger.send_async_progress(tab_id, True, ProgressStatus.JOB_SUBMISSION)
        await self._messenger.send_job_submitted(tab_id)
        self._set_state(ConversationState.JOB_SUBMITTED)
        job.job_id = await self._jobs.start_remote_job(job)
        log.info("Transformation job %s started", job.job_id)

    # -------------------------------------------------------------------------
    # SQL conversion forms
    # -------------------------------------------------------------------------

    async def _select_sql_metadata_file(self, event: FormActionClicked) -> None:
        tab_id = event.tab_id
        path = await self._ide.pick_file("Select", SQL_METADATA_EXTENSIONS)
        if not path:
            await self._finish(tab_id, text.JOB_CANCELLED)
            return

        try:
            metadata = parse_sql_metadata(read_sct_from_zip(path))
        except InvalidFileError as e:
            log.info("Rejected SQL metadata file %s: %s", path, e)
            await self._messenger.send_error_response(e.code, tab_id)
            await self._messenger.send_sql_metadata_file_prompt(tab_id)
            return

        job = self.session.job
        job.metadata_path = path
        job.source_db = metadata.source_db
        job.target_db = metadata.target_db
        job.source_server_name = metadata.source_server_name
        job.schema_options = metadata.schema_options

        await self._messenger.send_answer(text.SQL_METADATA_RECEIVED, tab_id)
        await self._messenger.send_sql_project_prompt(
            list(self.session.candidate_projects.values()), job.schema_options, tab_id
        )

    async def _confirm_sql_conversion(self, event: FormActionClicked) -> None:
        tab_id = event.tab_id
        job = self.session.job
        job.objective = TransformObjective.SQL_CONVERSION
        job.project_path = event.value(FormField.SQL_CONVERSION_PROJECT) or ""
        job.schema = event.value(FormField.SQL_SCHEMA)
        await self._messenger.send_message(
            f"Project: {job.project_name}, schema: {job.schema}",
            tab_id,
            ChatMessageType.PROMPT,
        )
        await self._require_auth()
        await self._submit_job(tab_id)

    # -------------------------------------------------------------------------
    # Job control forms
    # -------------------------------------------------------------------------

    async def _cancel_transformation_form(self, event: FormActionClicked) -> None:
        await self._finish(event.tab_id, text.JOB_CANCELLED)

    async def _view_transformation_hub(self, event: FormActionClicked) -> None:
        await self._ide.execute_command(FOCUS_TRANSFORMATION_HUB_COMMAND)

    async def _view_summary(self, event: FormActionClicked) -> None:
        await self._ide.execute_command(VIEW_SUMMARY_COMMAND)

    async def _stop_transformation_job(self, event: FormActionClicked) -> None:
        try:
            await self._jobs.stop_remote_job(self.session.job.job_id)
        finally:
            self._set_state(ConversationState.IDLE)

    async def _start_new_transformation(self, event: FormActionClicked) -> None:
        self._storage.new_session(event.tab_id)
        await self._messenger.send_command_message(event.tab_id, CLEAR_CHAT_COMMAND)
        await self._transform_initiated(TransformInitiated(tab_id=event.tab_id))

    async def _open_hil_file(self, event: FormActionClicked) -> None:
        await self._jobs.open_hil_pom_file()

    async def _open_build_log(self, event: FormActionClicked) -> None:
        await self._jobs.open_build_log()
        await self._messenger.send_answer(text.VIEW_BUILD_LOG, event.tab_id)

    # -------------------------------------------------------------------------
    # Human in the loop
    # -------------------------------------------------------------------------

    async def _hil_start_intervention(self, event: HILStartIntervention) -> None:
        self._set_state(ConversationState.WAITING_FOR_HIL_INPUT)
        message = "I need your help to upgrade a dependency."
        if event.code_snippet:
            message += f"\n\n```\n{event.code_snippet}\n```"
        await self._messenger.send_message(message, event.tab_id)

    async def _hil_prompt_for_dependency(self, event: HILPromptForDependency) -> None:
        await self._messenger.send_dependency_prompt(
            event.tab_id, event.dependencies, event.current_version
        )

    async def _confirm_dependency(self, event: FormActionClicked) -> None:
        tab_id = event.tab_id
        selection = event.value(FormField.DEPENDENCY)
        await self._messenger.send_message(
            f"I will continue the transformation with version {selection}.", tab_id
        )
        await self._require_auth()
        self._set_state(ConversationState.JOB_SUBMITTED)
        await self._jobs.resume_with_dependency(selection)

    async def _cancel_dependency(self, event: FormActionClicked) -> None:
        await self._messenger.send_message("Cancel", event.tab_id, ChatMessageType.PROMPT)
        await self._continue_without_hil(event.tab_id)

    async def _continue_without_hil(self, tab_id: str | None) -> None:
        self._set_state(ConversationState.JOB_SUBMITTED)
        try:
            await self._jobs.resume_with_dependency(None)
        except Exception as e:
            log.error("Resuming without dependency selection failed: %s", e)
            await self._finish(tab_id, str(e))
            return
        await self._messenger.send_message(text.CONTINUE_WITHOUT_HIL, tab_id)

    async def _hil_selection_uploaded(self, event: HILSelectionUploaded) -> None:
        self._set_state(ConversationState.JOB_SUBMITTED)
        await self._messenger.send_answer(text.HIL_RESUME, event.tab_id)

    # -------------------------------------------------------------------------
    # Job outcome
    # -------------------------------------------------------------------------

    async def _transformation_finished(self, event: TransformationFinished) -> None:
        await self._finish(event.tab_id, event.message)

    async def _finish(self, tab_id: str | None, message: str | None) -> None:
        self._set_state(ConversationState.IDLE)
        if message:
            await self._messenger.send_job_finished(tab_id, message)

    async def _error_thrown(self, event: ErrorThrown) -> None:
        error = event.error
        if isinstance(error, TransformError):
            await self._handle_transform_error(error, event.tab_id)
            return
        log.error("Transformation error: %s", error)
        await self._messenger.send_error_message(str(error), event.tab_id)

    async def _handle_transform_error(self, error: TransformError, tab_id: str | None) -> None:
        kind = error.kind
        log.info("Handling %s in state %s", kind.name, self.state.name)

        if kind == ErrorKind.AUTH:
            self.session.is_authenticating = True
            auth_state = error.state if isinstance(error, AuthError) else "disconnected"
            await self._messenger.send_auth_needed(auth_state, tab_id)
        elif kind.is_no_projects:
            await self._messenger.send_error_response(NO_PROJECT_RESPONSE_CODES[kind], tab_id)
        elif kind == ErrorKind.ABSOLUTE_PATH_DETECTED:
            await self._messenger.send_known_error(tab_id, error.detail or str(error))
        elif kind == ErrorKind.ALTERNATE_VERSIONS_NOT_FOUND:
            await self._messenger.send_known_error(tab_id, text.DEPENDENCY_VERSIONS_NOT_FOUND)
            await self._continue_without_hil(tab_id)
        elif kind.is_fatal:
            self._set_state(ConversationState.IDLE)
            await self._messenger.send_error_message(text.JOB_START_FAILED, tab_id)
        elif kind == ErrorKind.PRE_BUILD:
            await self._messenger.send_job_submitted(tab_id, failed_in_pre_build=True)
            await self._messenger.send_async_progress(
                tab_id, True, ProgressStatus.JOB_FAILED_IN_PRE_BUILD
            )
            await self._jobs.open_build_log()
            await self._messenger.send_answer(text.VIEW_BUILD_LOG, tab_id)
