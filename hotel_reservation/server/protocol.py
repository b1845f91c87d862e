"""
Line-oriented text channel over a stream socket.

Lines are UTF-8 and newline terminated. Prompts are written without a
trailing newline and the next line read is the answer.
"""

import socket
from typing import Iterable, Optional


class ConnectionClosed(Exception):
    """The peer closed the connection or the socket was shut down"""


class LineChannel:

    def __init__(self, sock: socket.socket, encoding: str = "utf-8"):
        self.sock = sock
        self.encoding = encoding
        self._reader = sock.makefile("r", encoding=encoding, errors="replace", newline=None)

    def send(self, text: str) -> None:
        try:
            self.sock.sendall(text.encode(self.encoding))
        except OSError as e:
            raise ConnectionClosed(str(e)) from e

    def send_line(self, text: str = "") -> None:
        self.send(f"{text}\n")

    def send_lines(self, lines: Iterable[str]) -> None:
        self.send("".join(f"{line}\n" for line in lines))

    def readline(self) -> str:
        """Next line without its terminator; raises ConnectionClosed at EOF"""
        try:
            line = self._reader.readline()
        except (OSError, ValueError) as e:
            raise ConnectionClosed(str(e)) from e
        if not line:
            raise ConnectionClosed("peer closed the connection")
        return line.rstrip("\r\n")

    def prompt(self, label: str) -> str:
        self.send(label)
        return self.readline().strip()

    def close(self) -> None:
        try:
            self._reader.close()
        finally:
            try:
                self.sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # already disconnected
                pass
            self.sock.close()


def format_peer(address: Optional[object]) -> str:
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address) if address else "unknown"
