"""
shell-fm Socket Client

shell-fm accepts one command per TCP connection: the client writes a single
line, the daemon answers (or not) and closes the connection. Now-playing data
comes from the "info" command with a format string; fields are joined with
"||" so titles containing spaces or punctuation survive the round trip.

Socket and protocol failures never escape this module: queries return None
and commands return False.
"""

import socket
import logging
from typing import Optional

from shellfm_lcd.exceptions import DaemonConnectionError, DaemonError, DaemonProtocolError
from shellfm_lcd.logging_config import get_logger
from shellfm_lcd.status_tracker import TrackSample

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 54311
DEFAULT_TIMEOUT = 2.0

FIELD_SEPARATOR = "||"
# artist, album, title, remaining seconds
INFO_COMMAND = "info " + FIELD_SEPARATOR.join(["%a", "%l", "%t", "%R"])
VOLUME_COMMAND = "info %v"
RECV_SIZE = 4096


def parse_info(response: str) -> TrackSample:
    """
    Parse the answer to INFO_COMMAND.

    Args:
        response: Raw text returned by the daemon

    Returns:
        TrackSample with the parsed fields

    Raises:
        DaemonProtocolError: If the response is empty or malformed
    """
    text = response.strip("\r\n")
    if not text.strip():
        raise DaemonProtocolError("Empty info response", command=INFO_COMMAND)

    fields = text.split(FIELD_SEPARATOR)
    if len(fields) != 4:
        raise DaemonProtocolError(
            f"Expected 4 info fields, got {len(fields)}",
            command=INFO_COMMAND,
            context={'response': text[:80]}
        )

    artist, album, title, remaining = fields
    if not (artist or album or title):
        raise DaemonProtocolError("Nothing playing", command=INFO_COMMAND)
    try:
        remaining_seconds = int(remaining.strip())
    except ValueError as e:
        raise DaemonProtocolError(
            f"Remaining time is not a number: {remaining!r}",
            command=INFO_COMMAND
        ) from e

    return TrackSample(artist=artist, title=title, album=album, remaining_seconds=remaining_seconds)


class ShellFMClient:
    """Line-protocol client for the shell-fm network interface."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 timeout: float = DEFAULT_TIMEOUT, logger: Optional[logging.Logger] = None):
        """
        Initialize the client.

        Args:
            host: Daemon host name
            port: Daemon TCP port
            timeout: Seconds allowed for connect and each read
            logger: Optional logger instance
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.logger = logger or get_logger(__name__)

    def request(self, line: str) -> str:
        """
        Send one command line and return everything the daemon wrote back.

        Raises:
            DaemonConnectionError: If the connection, write or read fails
        """
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout) as sock:
                sock.sendall((line + "\n").encode("utf-8"))
                chunks = []
                while True:
                    data = sock.recv(RECV_SIZE)
                    if not data:
                        break
                    chunks.append(data)
        except OSError as e:
            raise DaemonConnectionError(
                f"Request to {self.host}:{self.port} failed: {e}",
                command=line
            ) from e
        return b"".join(chunks).decode("utf-8", errors="replace")

    def query(self) -> Optional[TrackSample]:
        """
        Fetch now-playing data.

        Returns:
            TrackSample, or None if the daemon is unreachable or idle
        """
        try:
            return parse_info(self.request(INFO_COMMAND))
        except DaemonError as e:
            self.logger.debug("No now-playing data: %s", e)
            return None

    def send_command(self, command: str) -> bool:
        """
        Send a command without expecting an answer.

        Returns:
            True if the command was delivered
        """
        try:
            self.request(command)
        except DaemonError as e:
            self.logger.warning("Command %r failed: %s", command, e)
            return False
        self.logger.debug("Sent command %r", command)
        return True

    def get_volume(self) -> Optional[int]:
        """
        Read the daemon's current volume.

        Returns:
            Volume as an integer, or None if it could not be read
        """
        try:
            response = self.request(VOLUME_COMMAND).strip()
        except DaemonError as e:
            self.logger.debug("Could not read volume: %s", e)
            return None
        try:
            return int(response)
        except ValueError:
            self.logger.debug("Unexpected volume response %r", response)
            return None
