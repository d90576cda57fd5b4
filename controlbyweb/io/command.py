"""
ControlByWeb wire-level command client.

ControlByWeb modules speak a minimal HTTP dialect over raw TCP. A command is a
single GET line (optionally followed by a basic-auth header), the module
answers with an XML document, and the connection is closed again. Every
exchange therefore uses a fresh connection.

Terms:
- Request = A command line sent by the Client to the module
- Response = The XML document the module answers with
- Client = A class which sends Requests and receives Responses

Example usage:
async def main():
    client = CbwClient("192.0.2.10", 80)
    resp = await client.send_request(Request("/state.xml"))
    print(resp.child_text("relay1state"))

asyncio.run(main())
"""

import asyncio
import base64
import logging
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import (
    CbwBadResponseError,
    CbwConfigurationError,
    CbwConnectionError,
    CbwTimeoutError,
    CbwUnauthorizedError,
)

# Constants
class ClientConst:
    """Constants for the CbwClient"""
    DEFAULT_PORT = 80
    DEFAULT_TIMEOUT = 5.0
    MIN_TIMEOUT = 0.1
    MAX_TIMEOUT = 60.0
    RECEIVE_BUFFER_SIZE = 65536
    AUTH_USER = "none"
    UNAUTHORIZED_MARKER = "401 Authorization Required"
    ENCODING = "ascii"


def format_value(value: Any) -> str:
    """Render a query value the way the modules expect it"""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


@dataclass
class Request:
    """Represents a command to be sent to a module"""
    path: str
    query: dict[str, Any] = field(default_factory=dict)
    no_reply: Optional[bool] = False  # None leaves the noReply parameter out
    password: Optional[str] = None
    raw_sent: Optional[bytes] = None
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self):
        if not self.path.startswith("/"):
            raise ValueError(f"Request.path must start with '/', got {self.path!r}")

    def command(self) -> str:
        """Build the command string, including the auth header when a password is set"""
        params = [f"{key}={format_value(value)}" for key, value in self.query.items()]
        if self.no_reply is not None:
            params.append(f"noReply={1 if self.no_reply else 0}")
        target = self.path + ("?" + "&".join(params) if params else "")
        command = f"GET {target} HTTP/1.1\r\n"
        if self.password:
            credentials = f"{ClientConst.AUTH_USER}:{self.password}".encode(ClientConst.ENCODING)
            command += f"Authorization: Basic {base64.b64encode(credentials).decode(ClientConst.ENCODING)}\r\n"
        return command + "\r\n"

    def to_bytes(self) -> bytes:
        """Convert request to wire format"""
        self.raw_sent = self.command().encode(ClientConst.ENCODING)
        return self.raw_sent


@dataclass()
class Response:
    text: str
    root: Optional[ET.Element] = None  # None when the module sent nothing back
    raw_rcvd: Optional[bytes] = None
    request: Optional[Request] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def is_empty(self) -> bool:
        return self.root is None

    def child_text(self, name: str) -> Optional[str]:
        """Text of a direct child of the root node, or None"""
        if self.root is None:
            return None
        node = self.root.find(name)
        return node.text if node is not None else None


def parse_response(raw: bytes, request: Optional[Request] = None) -> Response:
    """
    Turn raw bytes from a module into a Response.

    Trailing NUL padding and whitespace are removed. An empty reply yields a
    Response with no root. A module that rejects the credentials answers with a
    401 page, which raises CbwUnauthorizedError. Anything that does not parse as
    XML raises CbwBadResponseError carrying the text.
    """
    text = raw.decode(ClientConst.ENCODING, errors="replace").strip("\x00 \t\r\n")
    if not text:
        return Response(text="", raw_rcvd=raw, request=request)
    if ClientConst.UNAUTHORIZED_MARKER in text:
        raise CbwUnauthorizedError("Module rejected the supplied password")

    # Some firmware prefixes the document with an HTTP status line and headers
    start = text.find("<")
    if start < 0:
        raise CbwBadResponseError("Response does not contain an XML document", response=text)
    try:
        root = ET.fromstring(text[start:])
    except ET.ParseError as e:
        raise CbwBadResponseError(f"Unable to parse response: {e}", response=text) from e
    return Response(text=text, root=root, raw_rcvd=raw, request=request)


class CbwClient:
    """
    One-command-per-connection TCP client.

    Request:  "GET /<file>.xml?<params>&noReply=<0|1> HTTP/1.1\\r\\n[auth]\\r\\n"
    Response: XML document (NUL padded), or nothing at all
    """

    def __init__(self,
                 host: Optional[str],
                 port: int = ClientConst.DEFAULT_PORT,
                 timeout: Optional[float] = None,
                 receive_buffer_size: int = ClientConst.RECEIVE_BUFFER_SIZE,
                 logger: Optional[logging.Logger] = None):
        self.host = host
        self.port = port
        if timeout is None: timeout = ClientConst.DEFAULT_TIMEOUT
        self.timeout = max(ClientConst.MIN_TIMEOUT, min(timeout, ClientConst.MAX_TIMEOUT))
        self.receive_buffer_size = receive_buffer_size
        self.logger = logger or logging.getLogger(__name__)
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._lock = asyncio.Lock()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    def is_connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        if self.is_connected():
            return
        if not self.host:
            raise CbwConfigurationError("Module host is not set")
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise CbwConnectionError(self.host, self.port, f"Timed out connecting to {self.host}:{self.port}") from e
        except OSError as e:
            raise CbwConnectionError(self.host, self.port, f"Unable to connect to {self.host}:{self.port}: {e}") from e
        self.logger.debug(f"Connected to module at {self.host}:{self.port}")

    async def disconnect(self) -> None:
        writer = self._writer
        self._reader = None
        self._writer = None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            # The module often resets the connection straight after answering
            pass
        self.logger.debug(f"Disconnected from module at {self.host}:{self.port}")

    async def send_request(self, req: Request) -> Response:
        """Send one command, read one reply, disconnect."""
        async with self._lock:
            await self.connect()
            try:
                wire = req.to_bytes()
                req.timestamp = time.time()
                self._writer.write(wire)
                await asyncio.wait_for(self._writer.drain(), timeout=self.timeout)
                raw = await asyncio.wait_for(self._reader.read(self.receive_buffer_size), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                self.logger.error(f"No response from {self.host}:{self.port} after {self.timeout:.1f}s")
                raise CbwTimeoutError(f"No response from {self.host}:{self.port} after {self.timeout:.1f}s") from e
            except OSError as e:
                raise CbwConnectionError(self.host, self.port, f"Connection to {self.host}:{self.port} failed: {e}") from e
            finally:
                await self.disconnect()
        return parse_response(raw, request=req)
