"""SSH command and SFTP transfer connections"""

import logging
import os
import posixpath
import socket
from typing import Callable, Optional

import paramiko
from paramiko import SSHClient, AutoAddPolicy, WarningPolicy

from sshdebugger.exceptions import ConfigurationError, SSHConnectionError, TransferError
from .base import RemoteTarget

logger = logging.getLogger(__name__)

KEY_HINT = "Try using ssh-keygen -t ecdsa -m PEM to create one"


def load_private_key(key_file: str, passphrase: Optional[str] = None) -> paramiko.PKey:
    """Parse a private key file, optionally passphrase protected

    Args:
        key_file: Path to the private key (``~`` is expanded)
        passphrase: Key passphrase; blank values mean no passphrase

    Returns:
        Loaded paramiko key

    Raises:
        ConfigurationError: If the file is missing or cannot be parsed
    """
    expanded_key = os.path.expanduser(key_file)
    password = passphrase.encode("utf-8") if passphrase and passphrase.strip() else None

    try:
        pkey = paramiko.PKey.from_path(expanded_key, password)
    except (OSError, ValueError, paramiko.SSHException) as e:
        raise ConfigurationError(f"{e}\n\n{KEY_HINT}") from e
    except TypeError as e:
        # cryptography's answer to an encrypted key loaded without a passphrase
        if password is not None:
            raise
        raise ConfigurationError(f"{e}\n\n{KEY_HINT}") from e

    logger.debug(f"Loaded {pkey.get_name()} key from {expanded_key}")
    return pkey


def _create_client(skip_host_verification: bool) -> SSHClient:
    client = SSHClient()
    if skip_host_verification:
        client.set_missing_host_key_policy(WarningPolicy())
    else:
        client.set_missing_host_key_policy(AutoAddPolicy())
    return client


def _connect_client(client: SSHClient, target: RemoteTarget, pkey: paramiko.PKey, timeout: float) -> None:
    # Key-only authentication: agent and ~/.ssh discovery would hide a bad key setting
    client.connect(
        hostname=target.host,
        port=target.port,
        username=target.user,
        pkey=pkey,
        timeout=timeout,
        banner_timeout=timeout,
        auth_timeout=timeout,
        allow_agent=False,
        look_for_keys=False,
    )


class CommandConnection:
    """Long-lived SSH connection used to run remote commands"""

    def __init__(self, target: RemoteTarget, pkey: paramiko.PKey,
                 skip_host_verification: bool = False, timeout: float = 10):
        self.target = target
        self.pkey = pkey
        self.skip_host_verification = skip_host_verification
        self.timeout = timeout
        self.client: Optional[SSHClient] = None

    @property
    def is_connected(self) -> bool:
        if self.client is None:
            return False
        transport = self.client.get_transport()
        return transport is not None and transport.is_active()

    def connect(self) -> None:
        """Connect, failing fast on the first authentication or network error

        Raises:
            SSHConnectionError: With the underlying transport message
        """
        client = _create_client(self.skip_host_verification)
        try:
            logger.debug(f"Connecting to {self.target.address}:{self.target.port}")
            _connect_client(client, self.target, self.pkey, self.timeout)
        except (paramiko.SSHException, socket.error) as e:
            client.close()
            logger.error(f"Failed to connect to {self.target.host}: {e}")
            raise SSHConnectionError(str(e)) from e

        self.client = client
        logger.info(f"Connected to {self.target.host}")

    def run(self, command: str) -> str:
        """Run a command and wait for it to finish

        The exit status is logged but not interpreted; callers decide success
        from the output text.

        Args:
            command: Shell command line

        Returns:
            stdout with trailing line terminators removed
        """
        if not self.is_connected:
            raise SSHConnectionError(f"Not connected to {self.target.host}")

        logger.debug(f"Executing on {self.target.host}: {command}")
        try:
            stdin, stdout, stderr = self.client.exec_command(command)
            stdin.close()
            stdout_str = stdout.read().decode("utf-8", errors="replace")
            stderr_str = stderr.read().decode("utf-8", errors="replace")
            return_code = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, socket.error) as e:
            logger.error(f"Failed to execute remote command: {e}")
            raise SSHConnectionError(str(e)) from e

        logger.debug(f"Command completed with return code: {return_code}")
        if stderr_str:
            logger.debug(f"stderr: {stderr_str.rstrip()}")

        return stdout_str.rstrip("\r\n")

    def close(self) -> None:
        if self.is_connected:
            try:
                self.client.close()
                logger.info(f"Closed SSH connection to {self.target.host}")
            except Exception as e:
                logger.warning(f"Error closing SSH connection: {e}")
        self.client = None


class TransferConnection:
    """SFTP connection opened for a single upload and closed right after

    Uses short keep-alive and operation timeouts, separate from the command
    connection which has to wait out long-running installers.
    """

    keepalive_interval = 15
    operation_timeout = 15.0

    def __init__(self, target: RemoteTarget, pkey: paramiko.PKey,
                 skip_host_verification: bool = False, timeout: float = 10):
        self.target = target
        self.pkey = pkey
        self.skip_host_verification = skip_host_verification
        self.timeout = timeout

    def _connect(self) -> SSHClient:
        client = _create_client(self.skip_host_verification)
        _connect_client(client, self.target, self.pkey, self.timeout)
        client.get_transport().set_keepalive(self.keepalive_interval)
        return client

    @staticmethod
    def _ensure_remote_dir(sftp: paramiko.SFTPClient, remote_dir: str) -> None:
        """Create remote_dir and any missing parents"""
        current = "/" if remote_dir.startswith("/") else ""
        for part in remote_dir.strip("/").split("/"):
            current = posixpath.join(current, part) if current else part
            try:
                sftp.stat(current)
            except IOError:
                logger.debug(f"Creating remote directory: {current}")
                sftp.mkdir(current)

    def upload_tree(self, local_dir: str, remote_dir: str,
                    progress_callback: Optional[Callable[[int], None]] = None) -> int:
        """Recursively upload a local directory

        Args:
            local_dir: Local directory to upload
            remote_dir: Absolute remote destination directory
            progress_callback: Called with the number of bytes sent since the previous call

        Returns:
            Number of files uploaded

        Raises:
            TransferError: If connecting or any file transfer fails
        """
        client = None
        uploaded = 0
        try:
            client = self._connect()
            sftp = client.open_sftp()
            sftp.get_channel().settimeout(self.operation_timeout)
            try:
                for root, dirs, files in os.walk(local_dir):
                    dirs.sort()
                    relative = os.path.relpath(root, local_dir)
                    if relative == os.curdir:
                        remote_root = remote_dir
                    else:
                        remote_root = posixpath.join(remote_dir, *relative.split(os.sep))
                    self._ensure_remote_dir(sftp, remote_root)

                    for name in sorted(files):
                        local_path = os.path.join(root, name)
                        remote_path = posixpath.join(remote_root, name)
                        logger.debug(f"Uploading {local_path} -> {remote_path}")
                        if progress_callback:
                            sftp.put(local_path, remote_path, callback=_delta_callback(progress_callback))
                        else:
                            sftp.put(local_path, remote_path)
                        uploaded += 1
            finally:
                sftp.close()
        except Exception as e:
            logger.error(f"Failed to transfer files: {e}")
            raise TransferError(str(e)) from e
        finally:
            if client is not None:
                client.close()

        logger.info(f"Uploaded {uploaded} file(s) to {self.target.host}:{remote_dir}")
        return uploaded


def _delta_callback(progress_callback: Callable[[int], None]) -> Callable[[int, int], None]:
    """Turn paramiko's cumulative per-file callback into byte increments"""
    sent = [0]

    def callback(transferred: int, total: int) -> None:
        progress_callback(transferred - sent[0])
        sent[0] = transferred

    return callback


class Session:
    """A command connection and a transfer connection to one remote target

    Owned by a single pipeline run; always close it (or use it as a context
    manager).
    """

    def __init__(self, target: RemoteTarget, commands: CommandConnection, transfer: TransferConnection):
        self.target = target
        self.commands = commands
        self.transfer = transfer

    @classmethod
    def open(cls, target: RemoteTarget, skip_host_verification: bool = False,
             connect_timeout: float = 10) -> "Session":
        """Load the private key, then connect the command connection

        Raises:
            ConfigurationError: If the private key cannot be loaded (no network I/O happens)
            SSHConnectionError: If the connection fails
        """
        pkey = load_private_key(target.private_key, target.private_key_password)
        commands = CommandConnection(target, pkey, skip_host_verification, connect_timeout)
        commands.connect()
        transfer = TransferConnection(target, pkey, skip_host_verification, connect_timeout)
        return cls(target, commands, transfer)

    @property
    def is_connected(self) -> bool:
        return self.commands.is_connected

    def run_command(self, command: str) -> str:
        return self.commands.run(command)

    def ping(self) -> str:
        """Check that the command connection actually runs commands

        Returns:
            The echoed text

        Raises:
            SSHConnectionError: With the raw remote output when it is not the echo
        """
        result = self.run_command("echo ping")
        if result != "ping":
            logger.error(f"Unexpected ping response from {self.target.host}: {result!r}")
            raise SSHConnectionError(result)
        return result

    def upload_tree(self, local_dir: str, remote_dir: str,
                    progress_callback: Optional[Callable[[int], None]] = None) -> int:
        return self.transfer.upload_tree(local_dir, remote_dir, progress_callback)

    def close(self) -> None:
        self.commands.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
