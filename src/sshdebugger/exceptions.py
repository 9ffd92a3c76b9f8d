"""
Pipeline exceptions.

Every failure that ends a pipeline run is one of these. The orchestrator
reports the message verbatim, so messages carry the raw remote output or
transport error rather than a paraphrase.
"""

from typing import Optional


class DebuggerError(Exception):
    """Base class for all pipeline failures"""
    pass


class ConfigurationError(DebuggerError):
    """
    Raised before any network action when the run cannot start.

    Examples:
        - No project configured, or the project is not a .NET project
        - Private key file missing or unparseable
        - Malformed configuration file
    """
    pass


class SSHConnectionError(DebuggerError):
    """Raised when the SSH connection fails or the ping probe does not answer"""
    pass


class RemoteCommandError(DebuggerError):
    """
    Raised when a remote command's output fails the step's success check.

    Attributes:
        output: Raw remote output, unmodified
    """

    def __init__(self, output: str, message: Optional[str] = None):
        super().__init__(message if message is not None else output)
        self.output = output


class TransferError(DebuggerError):
    """Raised when uploading the publish output fails"""
    pass


class LocalProcessError(DebuggerError):
    """
    Raised when a local build or publish process fails.

    Attributes:
        exit_code: Process exit code (None when the process could not start)
    """

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


class LauncherError(DebuggerError):
    """Raised when the external debugger launcher reports failure"""
    pass
