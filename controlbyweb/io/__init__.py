"""
Wire-level protocol implementation.

This module contains the lowest-level communication components:
- CbwClient - Raw TCP communication, one command per connection
- Request, Response - Command strings and parsed XML replies
"""

from .command import CbwClient, Request, Response, ClientConst, parse_response, format_value

__all__ = [
    "CbwClient",
    "Request",
    "Response",
    "ClientConst",
    "parse_response",
    "format_value",
]
