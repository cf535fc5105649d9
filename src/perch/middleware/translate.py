"""URI translation middleware.

Mounts an inner middleware chain under a URL prefix by stripping the
prefix before the inner chain sees the request. Matching is segment by
segment on the raw path, so ``/foo`` never captures ``/foobar``.
"""

from collections.abc import Sequence
from urllib.parse import unquote

from perch.errors import ConfigurationError, NotFound
from perch.http.request import Request
from perch.middleware.protocol import AnyResponse, Next
from perch.static.paths import split_config_path


class TranslateUri:
    """Strip a prefix from the request path, or 404 if it isn't there.

    Usage::

        app.add_middleware(TranslateUri("/foo"))
        app.add_middleware(StaticResources(MountConfig.for_directory("public")))

        # GET /foo/site.css   -> public/site.css
        # GET /site.css       -> 404

    The stripped path keeps a leading ``/``; the bare prefix becomes ``/``.
    """

    __slots__ = ("_prefix",)

    def __init__(self, prefix: str | Sequence[str]) -> None:
        try:
            self._prefix = split_config_path(prefix)
        except ValueError as exc:
            msg = f"Invalid translation prefix {prefix!r}: {exc}"
            raise ConfigurationError(msg) from exc

    @property
    def prefix(self) -> tuple[str, ...]:
        return self._prefix

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        if not self._prefix:
            return await next(request)

        raw = request.raw_path
        # Only the prefix segments are decoded; the remainder stays raw
        parts = raw.split("/")
        count = len(self._prefix)
        if len(parts) <= count or tuple(unquote(p) for p in parts[1 : count + 1]) != self._prefix:
            raise NotFound
        remainder = "/".join(parts[count + 1 :])
        return await next(request.with_path("/" + remainder))
