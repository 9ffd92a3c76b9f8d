"""Abstract base class for remote installers"""

from abc import ABC, abstractmethod
from typing import Tuple


class BaseInstaller(ABC):
    """A remote install script whose output tells whether it succeeded

    The scripts are idempotent and report "already installed" themselves, so
    no install state is tracked locally. Success is decided from the output
    text only; subclasses list the phrases as class attributes.
    """

    #: Step label used in log lines
    label: str = ""

    #: Output ending with one of these means success
    success_suffixes: Tuple[str, ...] = ()

    #: Output containing one of these means success
    success_markers: Tuple[str, ...] = ()

    @abstractmethod
    def install_command(self) -> str:
        """Shell command that downloads and runs the installer

        Returns:
            Command line to run on the remote host
        """
        pass

    def is_success(self, output: str) -> bool:
        """Classify installer output

        Args:
            output: Trimmed remote stdout

        Returns:
            True if the component is installed (freshly or already)
        """
        if any(output.endswith(suffix) for suffix in self.success_suffixes):
            return True
        return any(marker in output for marker in self.success_markers)
