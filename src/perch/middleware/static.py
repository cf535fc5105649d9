"""Static resource middleware.

Serves resources from a mount for requests under its prefix. Requests the
mount has nothing for fall through to the next handler, so routes and
other mounts still get their turn. Rejected paths are answered with a 400
on the spot and never reach anything else.
"""

from perch.config import MountConfig
from perch.http.request import Request
from perch.middleware.protocol import AnyResponse, Next
from perch.static.service import SERVED_METHODS, ResourceService


class StaticResources:
    """Middleware that serves resources through a ``ResourceService``.

    Usage::

        app.add_middleware(StaticResources(
            MountConfig.for_directory("./public").with_path_prefix("/static"),
        ))

        # Pre-compressed siblings, bundled in a package
        app.add_middleware(StaticResources(
            MountConfig.for_package("myapp.assets")
            .with_path_prefix("/assets")
            .with_prefer_gzip(True),
        ))

    Only GET and HEAD are served; other methods fall through.
    """

    __slots__ = ("_service",)

    def __init__(self, mount: MountConfig | ResourceService) -> None:
        self._service = mount if isinstance(mount, ResourceService) else ResourceService(mount)

    @property
    def service(self) -> ResourceService:
        return self._service

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Serve a resource or fall through."""
        if request.method not in SERVED_METHODS:
            return await next(request)

        response = await self._service.respond(request)
        if response.status == 404:
            return await next(request)
        return response
