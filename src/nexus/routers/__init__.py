from .ai import router as ai_router

_routers = [ai_router]

__all__ = ["get_routers"]


def get_routers():
    return _routers
