"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> AnyResponse

Built-in middleware:
    StaticResources -- Serve resources from a MountConfig
    TranslateUri -- Strip a URL prefix before the inner chain
"""

from perch.middleware.protocol import AnyResponse, Middleware, Next
from perch.middleware.static import StaticResources
from perch.middleware.translate import TranslateUri

__all__ = [
    "AnyResponse",
    "Middleware",
    "Next",
    "StaticResources",
    "TranslateUri",
]
