"""CLI interface for ssh-debugger"""

import logging
import signal
import sys
import warnings
from contextlib import contextmanager
from typing import Optional

import click

from sshdebugger.build.dotnet import DotnetBuilder
from sshdebugger.build.project import ProjectInfo
from sshdebugger.core.cancellation import CancellationToken
from sshdebugger.core.config import Config
from sshdebugger.core.orchestrator import Orchestrator
from sshdebugger.debug.launcher import CommandLauncher, LogLauncher

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

EXIT_CANCELLED = 130


@contextmanager
def cancel_on_interrupt(token: CancellationToken):
    """First Ctrl-C cancels after the current step, the second one interrupts"""
    previous = signal.getsignal(signal.SIGINT)

    def handler(signum, frame):
        click.echo("\n⚠️  Cancelling after the current step (Ctrl-C again to abort)")
        token.cancel()
        signal.signal(signal.SIGINT, previous)

    signal.signal(signal.SIGINT, handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


def config_options(func):
    func = click.option(
        "-e",
        "--env-file",
        multiple=True,
        type=click.Path(exists=True),
        help="Load environment variables from file (can be used multiple times)",
    )(func)
    func = click.option(
        "-c",
        "--config",
        required=True,
        type=click.Path(exists=True),
        help="Path to configuration YAML file",
    )(func)
    return func


def pipeline_options(func):
    func = click.option(
        "-v",
        "--verbose",
        is_flag=True,
        help="Enable verbose logging",
    )(func)
    func = click.option(
        "--skip-host-verification",
        is_flag=True,
        help="Skip SSH host key verification (insecure, only for testing)",
    )(func)
    func = click.option(
        "--configuration",
        help="Build configuration (overrides project.configuration)",
    )(func)
    func = click.option(
        "-p",
        "--project",
        type=click.Path(exists=True, dir_okay=False),
        help="Project file (overrides project.path)",
    )(func)
    return config_options(func)


def load_project(cfg: Config, project: Optional[str], configuration: Optional[str]) -> Optional[ProjectInfo]:
    project_path = project or cfg.project_path
    if not project_path:
        return None
    return ProjectInfo.from_file(
        project_path,
        configuration=configuration or cfg.project_configuration,
        target_framework=cfg.project_target_framework,
    )


def run_pipeline(ctx, debug_only: bool, config: str, env_file: tuple, project: Optional[str],
                 configuration: Optional[str], skip_host_verification: bool, verbose: bool):
    if verbose or ctx.obj.get("debug"):
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        env_files = list(env_file) if env_file else None
        cfg = Config(config, env_files=env_files)
        if not cfg.validate():
            click.echo("✗ Configuration validation failed")
            sys.exit(1)

        launcher = CommandLauncher(cfg.launcher_command) if cfg.launcher_command else LogLauncher()
        token = CancellationToken()
        orchestrator = Orchestrator(
            cfg,
            load_project(cfg, project, configuration),
            DotnetBuilder(),
            launcher,
            cancel_token=token,
            skip_host_verification=skip_host_verification,
        )

        if skip_host_verification:
            click.echo("⚠️  WARNING: SSH host key verification is disabled!")

        with cancel_on_interrupt(token):
            result = orchestrator.run_debug_only() if debug_only else orchestrator.run()

    except Exception as e:
        click.echo(f"\n✗ Error: {e}")
        if verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    if result.cancelled:
        click.echo("\n⚠️  Cancelled")
        sys.exit(EXIT_CANCELLED)
    if result.succeeded:
        click.echo("\n✓ Debugger launched successfully")
        sys.exit(0)

    failed = result.failed_step
    click.echo(f"\n✗ {failed.status_text}" if failed else f"\n✗ {result.error}")
    sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug mode with verbose output and warnings",
)
@click.version_option(package_name="ssh-debugger")
@click.pass_context
def cli(ctx, debug):
    """ssh-debugger - Remote .NET debugging over SSH

    Build and publish a .NET project, deploy it to a Linux host and launch
    a vsdbg debugging session through SSH.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        # Suppress deprecation warnings in production mode
        warnings.filterwarnings("ignore", category=DeprecationWarning)


@cli.command()
@pipeline_options
@click.pass_context
def deploy(ctx, config: str, env_file: tuple, project: Optional[str], configuration: Optional[str],
           skip_host_verification: bool, verbose: bool):
    """Build, publish, deploy and start debugging

    Examples:
        ssh-debugger deploy -c debugger.yaml
        ssh-debugger deploy -c debugger.yaml -p src/App/App.csproj --configuration Release
    """
    run_pipeline(ctx, False, config, env_file, project, configuration, skip_host_verification, verbose)


@cli.command()
@pipeline_options
@click.pass_context
def debug(ctx, config: str, env_file: tuple, project: Optional[str], configuration: Optional[str],
          skip_host_verification: bool, verbose: bool):
    """Start debugging an already deployed project

    The project must be up to date; nothing is built or uploaded.

    Examples:
        ssh-debugger debug -c debugger.yaml
    """
    run_pipeline(ctx, True, config, env_file, project, configuration, skip_host_verification, verbose)


@cli.command()
@config_options
def validate(config: str, env_file: tuple):
    """Validate configuration file

    Examples:
        ssh-debugger validate -c debugger.yaml
        ssh-debugger validate -c debugger.yaml -e .env
    """
    try:
        env_files = list(env_file) if env_file else None
        cfg = Config(config, env_files=env_files)

        if not cfg.validate():
            click.echo("✗ Configuration validation failed")
            sys.exit(1)

        target = cfg.target
        paths = cfg.remote_paths
        click.echo("✓ Configuration is valid")
        click.echo(f"  Target: {target.address}:{target.port}")
        click.echo(f"  .NET folder: {paths.dotnet_dir}")
        click.echo(f"  vsdbg folder: {paths.vsdbg_dir}")
        click.echo(f"  Deployment folder: {paths.deployment_dir}")
        if cfg.project_path:
            click.echo(f"  Project: {cfg.project_path}")

        sys.exit(0)

    except Exception as e:
        click.echo(f"✗ Error: {e}")
        sys.exit(1)


def main():
    """Entry point for CLI"""
    cli()


if __name__ == "__main__":
    main()
