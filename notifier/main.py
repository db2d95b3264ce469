from notifier.api.main import app

__all__ = ["app"]
