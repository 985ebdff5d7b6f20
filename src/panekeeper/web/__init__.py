"""HTTP control surface"""

from .app import ControlServer, create_app

__all__ = ["ControlServer", "create_app"]
