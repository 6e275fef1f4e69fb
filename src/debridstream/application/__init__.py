from .debrid_client import DebridClient

__all__ = ["DebridClient"]
