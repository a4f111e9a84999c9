#!/usr/bin/env python3
"""Constants for the notification server.

These constants fix the HTTP timeouts, the shutdown bound, the process exit
codes and the response texts returned to clients.
"""

# Time allowed for reading a request body in seconds.
READ_TIMEOUT: float = 10.0

# Keep-alive idle timeout for client connections in seconds.
IDLE_TIMEOUT: float = 60.0

# Maximum time to wait for in-flight requests during shutdown in seconds.
SHUTDOWN_TIMEOUT: float = 5.0

# Maximum accepted request body in bytes (10 MiB).
MAX_BODY_SIZE: int = 10485760

# Process exit codes.
EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INTERRUPT: int = 2

# Response bodies.
MSG_SENT: str = "Notification sent and text copied to clipboard\n"
MSG_RUNNING: str = "Notification server is running\n"
MSG_FORBIDDEN: str = "This service is restricted to local network use only\n"
MSG_UNAUTHORIZED: str = "Unauthorized\n"
MSG_METHOD_NOT_ALLOWED: str = "Method not allowed\n"
MSG_EMPTY: str = "Empty message\n"
MSG_READ_ERROR: str = "Error reading request\n"

# Log file name, formatted with the startup timestamp.
LOG_FILE_TEMPLATE: str = "notification-server_{timestamp}.log"
LOG_TIMESTAMP_FORMAT: str = "%Y-%m-%d_%H-%M-%S"
