"""Remote runtime and debugger provisioning"""

import logging

from sshdebugger.exceptions import RemoteCommandError
from sshdebugger.installers.base import BaseInstaller
from sshdebugger.installers.dotnet import DotnetInstaller
from sshdebugger.installers.vsdbg import VsdbgInstaller
from sshdebugger.transport.base import RemotePaths
from sshdebugger.transport.ssh import Session

logger = logging.getLogger(__name__)


class Provisioner:
    """Makes sure the .NET runtime and vsdbg are installed on the remote host"""

    def __init__(self, session: Session, paths: RemotePaths, web: bool = False,
                 channel: str = "Current", vsdbg_version: str = "latest"):
        """Initialize provisioner

        Args:
            session: Open transport session
            paths: Remote install directories
            web: Install the ASP.NET Core runtime (web projects)
            channel: .NET release channel
            vsdbg_version: vsdbg version to request
        """
        self.session = session
        self.dotnet = DotnetInstaller(paths.dotnet_dir, web=web, channel=channel)
        self.vsdbg = VsdbgInstaller(paths.vsdbg_dir, version=vsdbg_version)

    def _install(self, installer: BaseInstaller) -> str:
        logger.info(f"{installer.label}: running installer on {self.session.target.host}")
        output = self.session.run_command(installer.install_command())
        if not installer.is_success(output):
            logger.error(f"{installer.label}: installer did not report success")
            raise RemoteCommandError(output)
        logger.debug(f"{installer.label} installer output:\n{output}")
        return output

    def install_runtime(self) -> str:
        """Install or upgrade the .NET runtime

        Returns:
            `dotnet --info` output from the installed runtime (informational)

        Raises:
            RemoteCommandError: With the raw installer output
        """
        self._install(self.dotnet)
        return self.session.run_command(self.dotnet.info_command())

    def install_debug_agent(self) -> str:
        """Install vsdbg, or accept the already installed copy

        Returns:
            Installer output

        Raises:
            RemoteCommandError: With the raw installer output
        """
        return self._install(self.vsdbg)
