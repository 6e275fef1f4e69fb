from .router import debrid_error_handler, router

__all__ = ["debrid_error_handler", "router"]
