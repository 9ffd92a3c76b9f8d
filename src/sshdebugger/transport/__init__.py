"""SSH transport"""

from .base import RemoteTarget, RemotePaths, expand_home
from .ssh import Session, load_private_key

__all__ = ["RemoteTarget", "RemotePaths", "expand_home", "Session", "load_private_key"]
