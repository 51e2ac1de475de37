"""Settlement gateway adapters.

Import concrete gateways from their modules; the HTTP gateway pulls in aiohttp.
"""

__all__ = []
