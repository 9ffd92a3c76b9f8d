"""Deployment directory management and upload"""

import logging
import os

from tqdm import tqdm

from sshdebugger.exceptions import RemoteCommandError, TransferError
from sshdebugger.transport.base import expand_home
from sshdebugger.transport.ssh import Session

logger = logging.getLogger(__name__)


def _tree_size(local_dir: str) -> int:
    total = 0
    for root, _, files in os.walk(local_dir):
        for name in files:
            total += os.path.getsize(os.path.join(root, name))
    return total


class Synchronizer:
    """Replaces the remote deployment directory with the local publish output

    The remote copy is authoritative: previous contents are deleted, never
    merged, and the upload is refused until that cleanup has succeeded.
    """

    def __init__(self, session: Session, remote_dir: str, show_progress: bool = True):
        """Initialize synchronizer

        Args:
            session: Open transport session
            remote_dir: Remote deployment directory for the project (may start with ~)
            show_progress: Display a progress bar while uploading
        """
        self.session = session
        self.remote_dir = remote_dir
        self.show_progress = show_progress
        self._prepared = False

    def prepare_command(self) -> str:
        d = self.remote_dir
        return (
            f"if [ ! -d {d} ]; then mkdir -p {d} 2>&1; "
            f"else find {d} -mindepth 1 -maxdepth 1 -exec rm -rf {{}} + 2>&1; fi"
        )

    def prepare_target(self) -> None:
        """Create the remote directory, or empty it if it already exists

        Raises:
            RemoteCommandError: If the command printed anything
        """
        output = self.session.run_command(self.prepare_command())
        if output:
            logger.error(f"Failed to prepare {self.remote_dir}: {output}")
            raise RemoteCommandError(output)
        self._prepared = True
        logger.info(f"Folder {self.remote_dir} created or cleaned")

    @property
    def upload_dir(self) -> str:
        """Remote directory with ~ expanded, as SFTP needs"""
        return expand_home(self.remote_dir, self.session.target.user)

    def upload(self, local_dir: str) -> int:
        """Upload the publish output into the prepared remote directory

        Args:
            local_dir: Local publish output directory

        Returns:
            Number of files uploaded

        Raises:
            TransferError: If the directory was not prepared, the local
                directory is missing or the transfer fails
        """
        if not self._prepared:
            raise TransferError(f"Remote folder {self.remote_dir} has not been created or cleaned")

        if not os.path.isdir(local_dir):
            raise TransferError(f"Publish folder not found: {local_dir}")

        total = _tree_size(local_dir)
        logger.info(f"Uploading {local_dir} ({total / (1024 * 1024):.2f} MB) to {self.upload_dir}")

        with tqdm(total=total, desc=f"Upload to {self.session.target.host}", unit="B",
                  unit_scale=True, disable=not self.show_progress) as progress:
            return self.session.upload_tree(local_dir, self.upload_dir, progress_callback=progress.update)
