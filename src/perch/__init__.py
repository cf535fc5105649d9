"""Perch: static resources over ASGI.

Serves files from a directory or an importable package under a URL
prefix, with path-traversal rejection, pre-compressed ``.gz`` variants,
and If-Modified-Since revalidation.

Basic usage::

    from perch import App, MountConfig

    app = App()
    app.mount(
        MountConfig.for_directory("./public")
        .with_path_prefix("/static")
        .with_prefer_gzip(True)
    )

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "ConfigurationError",
    "FileResponse",
    "FileSystemLoader",
    "HTTPError",
    "Middleware",
    "MountConfig",
    "Next",
    "NotFound",
    "PackageLoader",
    "PerchError",
    "Request",
    "ResourceService",
    "Response",
    "StaticResources",
    "StorageError",
    "TranslateUri",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name in ("AppConfig", "MountConfig"):
        from perch import config as _config

        return getattr(_config, name)

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name in ("Response", "FileResponse"):
        from perch.http import response as _resp

        return getattr(_resp, name)

    if name in ("FileSystemLoader", "PackageLoader", "ResourceService"):
        from perch import static as _static

        return getattr(_static, name)

    if name in ("AnyResponse", "Middleware", "Next", "StaticResources", "TranslateUri"):
        from perch import middleware as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "PerchError",
        "StorageError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
