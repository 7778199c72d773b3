from src.api.app import app

__all__ = ["app"]
