"""
Global application state
Shared resources accessible across all modules
"""
from buzzhub.core.broadcast import Broadcaster
from buzzhub.models import ServerConfig

# Server configuration
# Replaced by the loaded config at startup
CONFIG: ServerConfig = ServerConfig()

# Connected SSE clients
BROADCASTER: Broadcaster = Broadcaster()
