from .build_app import build_fleetwatch_app

__all__ = [
    "build_fleetwatch_app",
]
