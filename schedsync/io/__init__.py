"""
I/O layer for the CalDAV protocol.

This module provides the async implementation for executing DAVRequest
objects and returning DAVResponse objects.

The I/O layer is intentionally thin - it only handles HTTP transport.
All protocol logic (XML building/parsing) is in schedsync.protocol.

Example:
    from schedsync.protocol import CalDAVProtocol
    from schedsync.io import AsyncIO

    protocol = CalDAVProtocol("https://cal.example.com", "alice", "secret")
    io = AsyncIO()
    response = await io.execute(protocol.principal_request())
    principal = protocol.parse_principal(response)
"""

from .async_ import AsyncIO

__all__ = ["AsyncIO"]
