"""Token directory client."""

from .client import TokenDirectoryClient

__all__ = ["TokenDirectoryClient"]
