"""Debug launch document and launchers"""

from .launch import LaunchSpec, temporary_launch_file, write_launch_file
from .launcher import DebugLauncher, CommandLauncher, LogLauncher

__all__ = [
    "LaunchSpec",
    "temporary_launch_file",
    "write_launch_file",
    "DebugLauncher",
    "CommandLauncher",
    "LogLauncher",
]
