"""
modex - list the model classes an entrypoint reaches, by static call-graph tracing

Simple API:

    from modex import trace_entrypoint

    result = trace_entrypoint("app.service:load", root="src")

    # marker, receiver names and exclude globs come from a ModexConfig
    from modex.config_loader import ModexConfig
    result = trace_entrypoint("app.service:load", config=ModexConfig(root="src", marker="entities"))
    if result.ok:
        for model in result.sorted_models():
            print(model, result.usages_of(model))
    else:
        print(result.errors)

A class is a model when its module path contains the component ``models``
(configurable).
"""

from importlib.metadata import PackageNotFoundError, version

from loguru import logger


def trace_entrypoint(*args, **kwargs):
    """Lazy import wrapper for trace_entrypoint to keep package import light."""
    from .tracer import trace_entrypoint as _trace_entrypoint

    return _trace_entrypoint(*args, **kwargs)


try:
    __version__ = version("modex")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

# library stays silent unless the CLI (or the embedding application) enables it
logger.disable("modex")

__all__ = ["trace_entrypoint", "__version__"]
