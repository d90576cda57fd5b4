"""
A stand-in ControlByWeb module for the tests.

Serves canned XML documents on localhost, one command per connection, and
records every command it receives. Commands sent with noReply=1 get no answer,
like the real modules.
"""

import asyncio
from typing import Callable, Optional, Union
from urllib.parse import parse_qsl, urlsplit

Reply = Union[str, bytes, Callable[[str, dict], Union[str, bytes]]]

SILENT = object()  # read the command but never answer


class FakeModule:

    def __init__(self, replies: Optional[dict[str, Reply]] = None, honour_no_reply: bool = True):
        self.replies: dict = dict(replies or {})
        self.honour_no_reply = honour_no_reply
        self.commands: list[str] = []
        self.port: Optional[int] = None
        self._server: Optional[asyncio.AbstractServer] = None
        self._writers: list[asyncio.StreamWriter] = []

    async def __aenter__(self):
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        for writer in self._writers:
            writer.close()
        self._server.close()
        await self._server.wait_closed()

    # ============================
    # Recorded traffic
    # ============================

    @property
    def request_lines(self) -> list[str]:
        return [c.split("\r\n", 1)[0] for c in self.commands]

    @property
    def requests(self) -> list[tuple[str, dict[str, str]]]:
        """(path, query) of every command received, in order"""
        result = []
        for line in self.request_lines:
            target = urlsplit(line.split(" ")[1])
            result.append((target.path, dict(parse_qsl(target.query))))
        return result

    @property
    def queries(self) -> list[dict[str, str]]:
        return [query for _, query in self.requests]

    def headers(self, index: int = -1) -> list[str]:
        return [h for h in self.commands[index].split("\r\n")[1:] if h]

    # ============================
    # Server
    # ============================

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.append(writer)
        try:
            data = await reader.readuntil(b"\r\n\r\n")
            command = data.decode("ascii")
            self.commands.append(command)
            path, query = self.requests[-1]

            reply = self.replies.get(path, b"")
            if reply is SILENT:
                # Wait for the client to give up
                await reader.read()
                return
            if callable(reply):
                reply = reply(path, query)
            if self.honour_no_reply and query.get("noReply") == "1":
                reply = b""
            if isinstance(reply, str):
                reply = reply.encode("ascii")
            if reply:
                writer.write(reply)
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass


def document(root: str = "datavalues", **fields) -> str:
    """Build a flat XML document like the ones the modules serve"""
    body = "".join(f"<{tag}>{value}</{tag}>" for tag, value in fields.items())
    return f"<?xml version='1.0'?>\n<{root}>{body}</{root}>\x00\x00"
