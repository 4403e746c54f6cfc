"""trackgen — concurrent tracking-number allocation over a lookaside cache and a durable store."""

from trackgen.version import __version__

__all__ = ["__version__"]
