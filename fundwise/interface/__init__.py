"""Mini README: HTTP interface for Fundwise.

Exports the FastAPI application factory serving the JSON API and the public
transparency page.
"""

from .web_app import create_application

__all__ = ["create_application"]
