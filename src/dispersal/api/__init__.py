"""HTTP surface for the placement dashboard."""

from dispersal.api.server import create_app

__all__ = ["create_app"]
