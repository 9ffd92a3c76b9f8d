"""Main orchestration logic"""

import logging
from contextlib import ExitStack
from functools import partial
from typing import Callable, List, Optional, Tuple

from sshdebugger.build.project import ProjectInfo
from sshdebugger.core.cancellation import CancellationToken
from sshdebugger.core.provisioner import Provisioner
from sshdebugger.core.reporting import LoggingReporter, ProgressReporter
from sshdebugger.core.steps import PipelineResult, PipelineStep, StepName, StepOutcome
from sshdebugger.core.synchronizer import Synchronizer
from sshdebugger.debug.launch import LaunchSpec, temporary_launch_file, write_launch_file
from sshdebugger.debug.launcher import DebugLauncher
from sshdebugger.exceptions import (
    ConfigurationError,
    DebuggerError,
    LauncherError,
    LocalProcessError,
)
from sshdebugger.transport.ssh import Session

logger = logging.getLogger(__name__)

# Output line written when a step fails; {error} is the exception message
FAILURE_MESSAGES = {
    StepName.BUILD: "{error}",
    StepName.PUBLISH: "Step 'Publish' failed:- {error}",
    StepName.CONNECT: "SSH: Connect failed:- {error}",
    StepName.PROVISION_RUNTIME: "NET: Install failed\n{error}\n",
    StepName.PROVISION_DEBUG_AGENT: "VSDBG: Installation failed\n{error}\n",
    StepName.MANAGE_TARGET_DIR: "SSH: Failure:- {error}",
    StepName.UPLOAD: "SCP: File transfer failed\n{error}\n",
    StepName.EMIT_CONFIG: "JSON: Generation failed:- {error}",
    StepName.LAUNCH: "VSDBG: Failed to launch the debugger:- {error}",
}

StepAction = Callable[[], Optional[StepOutcome]]


class Orchestrator:
    """Runs the build, deploy and debug pipeline against one remote host

    Steps run strictly in order. A failed step stops the run; cancellation is
    checked before every step and stops the run without reporting a failure.
    The SSH session is closed on every exit path.
    """

    def __init__(self, config, project: ProjectInfo, builder, launcher: DebugLauncher,
                 reporter: Optional[ProgressReporter] = None,
                 cancel_token: Optional[CancellationToken] = None,
                 skip_host_verification: bool = False, show_progress: bool = True,
                 session_factory: Optional[Callable[..., Session]] = None):
        """Initialize orchestrator

        Args:
            config: Configuration instance (target, remote paths, installer settings)
            project: Project to deploy
            builder: Build collaborator (is_up_to_date, build, publish)
            launcher: Debugger launcher
            reporter: Output and progress sink (default: logging)
            cancel_token: Token polled between steps
            skip_host_verification: Skip SSH host key verification (insecure)
            show_progress: Show the upload progress bar
            session_factory: Opens the SSH session (default: Session.open)
        """
        self.config = config
        self.project = project
        self.builder = builder
        self.launcher = launcher
        self.reporter = reporter or LoggingReporter()
        self.cancel_token = cancel_token or CancellationToken()
        self.skip_host_verification = skip_host_verification
        self.show_progress = show_progress
        self.session_factory = session_factory or Session.open

        self.session: Optional[Session] = None
        self.synchronizer: Optional[Synchronizer] = None
        self.launch_json: Optional[str] = None
        self.result = PipelineResult()

    # -- step bookkeeping --------------------------------------------------

    def _record(self, name: StepName, outcome: StepOutcome, message: str = "") -> None:
        step = PipelineStep(name, outcome, message)
        self.result.steps.append(step)
        self.reporter.report_step(step)

    def _step(self, name: StepName, action: StepAction) -> bool:
        """Run one step

        Returns:
            True if the pipeline may continue
        """
        if self.cancel_token.is_cancelled:
            logger.info(f"Cancelled before step '{name.value}'")
            self.result.cancelled = True
            return False

        logger.debug(f"Starting step '{name.value}'")
        try:
            outcome = action() or StepOutcome.SUCCEEDED
        except DebuggerError as e:
            self.reporter.write_line(FAILURE_MESSAGES[name].format(error=e))
            self._record(name, StepOutcome.FAILED, str(e))
            return False
        except Exception as e:
            # Unexpected errors still mark the step failed before propagating
            self._record(name, StepOutcome.FAILED, str(e))
            raise

        self._record(name, outcome)
        if outcome is StepOutcome.CANCELLED:
            self.result.cancelled = True
            return False
        return True

    def _run_steps(self, steps: List[Tuple[StepName, StepAction]]) -> bool:
        for name, action in steps:
            if not self._step(name, action):
                return False
        return True

    # -- steps -------------------------------------------------------------

    def _build(self) -> StepOutcome:
        if self.builder.is_up_to_date(self.project):
            self.reporter.write_line(f"Project, {self.project.name}, is up to date, skipping build")
            return StepOutcome.SKIPPED

        self.reporter.write_line(f"Building project:- {self.project.name}")
        built = self.builder.build(self.project, self.cancel_token)
        if built is None:
            return StepOutcome.CANCELLED
        if not built:
            raise LocalProcessError("Build failed, check the build output")
        self.reporter.write_line("Step 'Build' succeeded")
        return StepOutcome.SUCCEEDED

    def _publish(self) -> StepOutcome:
        self.reporter.write_line(f"Publishing project:- {self.project.name}")
        exit_code = self.builder.publish(self.project, self.cancel_token)
        if exit_code is None:
            return StepOutcome.CANCELLED
        if exit_code != 0:
            raise LocalProcessError(f"exitCode = {exit_code}", exit_code)
        return StepOutcome.SUCCEEDED

    def _connect(self) -> None:
        target = self.config.target
        self.session = self.session_factory(target, skip_host_verification=self.skip_host_verification)
        self.session.ping()
        self.reporter.write_line("SSH: Connect completed")

    def _provisioner(self) -> Provisioner:
        return Provisioner(
            self.session,
            self.config.remote_paths,
            web=self.project.is_web,
            channel=self.config.dotnet_channel,
            vsdbg_version=self.config.vsdbg_version,
        )

    def _provision_runtime(self) -> None:
        self.reporter.write_line("NET: Verify installation")
        info = self._provisioner().install_runtime()
        self.reporter.write_line(f"NET: Install info \n{info}\n")

    def _provision_debug_agent(self) -> None:
        self.reporter.write_line("VSDBG: Verify installation")
        self._provisioner().install_debug_agent()
        self.reporter.write_line("VSDBG: Installation succeeded")

    def _manage_target_dir(self) -> None:
        self.reporter.write_line("SSH: Creating folders")
        remote_dir = self.config.remote_paths.project_dir(self.project.name)
        self.synchronizer = Synchronizer(self.session, remote_dir, show_progress=self.show_progress)
        self.synchronizer.prepare_target()
        self.reporter.write_line(f"SSH: Folder {remote_dir} created or cleaned")

    def _upload(self) -> None:
        self.reporter.write_line("SCP: Transferring files")
        self.synchronizer.upload(self.project.publish_dir)
        self.reporter.write_line("SCP: File transfer succeeded")

    def _emit_config(self, files: ExitStack) -> None:
        self.reporter.write_line("JSON: Generating")
        spec = LaunchSpec.from_settings(
            self.config.target,
            self.config.remote_paths,
            self.project.name,
            self.project.assembly_name,
            adapter=self.config.adapter,
        )
        try:
            self.launch_json = files.enter_context(temporary_launch_file())
            write_launch_file(spec, self.launch_json)
        except OSError as e:
            raise DebuggerError(str(e)) from e
        self.reporter.write_line("JSON: Generated successfully")

    def _launch(self) -> None:
        try:
            launched = self.launcher.launch(self.launch_json)
        except Exception as e:
            raise LauncherError(str(e)) from e
        if not launched:
            raise LauncherError("launcher reported failure")

    def _debug_steps(self) -> bool:
        # The launch file is created by the emit step and removed when both steps are done
        with ExitStack() as files:
            try:
                return self._run_steps([
                    (StepName.EMIT_CONFIG, partial(self._emit_config, files)),
                    (StepName.LAUNCH, self._launch),
                ])
            finally:
                self.launch_json = None

    # -- pipelines -----------------------------------------------------------

    def _preflight(self) -> None:
        if self.project is None:
            raise ConfigurationError("A startup project is not set or no project is currently active")
        if not self.project.is_dotnet:
            raise ConfigurationError(f"Project {self.project.name} is not .NET")

    def _close_session(self) -> None:
        if self.session is None:
            return
        try:
            self.session.close()
        except Exception as e:
            logger.error(f"Error closing SSH session: {e}")
        self.session = None

    def _execute(self, title: str, pipeline: Callable[[], bool]) -> PipelineResult:
        self.result = PipelineResult()
        logger.info("=" * 60)
        logger.info(title)
        logger.info("=" * 60)

        try:
            self._preflight()
        except ConfigurationError as e:
            self.reporter.write_line(str(e))
            self.result.error = str(e)
            return self.result

        try:
            pipeline()
        except Exception as e:
            self.reporter.write_line(f"SSH: Failed :- {e}")
            raise
        finally:
            self._close_session()

        if self.result.cancelled:
            logger.info("Pipeline cancelled")
        elif self.result.succeeded:
            logger.info("Pipeline completed successfully!")
        return self.result

    def _deploy_pipeline(self) -> bool:
        return self._run_steps([
            (StepName.BUILD, self._build),
            (StepName.PUBLISH, self._publish),
            (StepName.CONNECT, self._connect),
            (StepName.PROVISION_RUNTIME, self._provision_runtime),
            (StepName.PROVISION_DEBUG_AGENT, self._provision_debug_agent),
            (StepName.MANAGE_TARGET_DIR, self._manage_target_dir),
            (StepName.UPLOAD, self._upload),
        ]) and self._debug_steps()

    def _debug_only_pipeline(self) -> bool:
        if not self.builder.is_up_to_date(self.project):
            message = f"Project is not built:- {self.project.name}"
            self.reporter.write_line(message)
            self.result.error = message
            return False
        return self._run_steps([(StepName.CONNECT, self._connect)]) and self._debug_steps()

    def run(self) -> PipelineResult:
        """Build, publish, provision, deploy and start debugging

        Returns:
            Result with every step that ran
        """
        return self._execute(f"Deploying {self.project.name if self.project else ''} to "
                             f"{self.config.target.address}", self._deploy_pipeline)

    def run_debug_only(self) -> PipelineResult:
        """Start debugging an already deployed, up to date project

        Returns:
            Result with every step that ran
        """
        return self._execute(f"Debugging {self.project.name if self.project else ''} on "
                             f"{self.config.target.address}", self._debug_only_pipeline)
