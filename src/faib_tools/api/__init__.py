"""
HTTP API for FAIB Internal Tools.
"""

from faib_tools.api.main import app, create_app

__all__ = ["app", "create_app"]
