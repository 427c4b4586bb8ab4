from .publisher import ConsolePublisher

__all__ = ["ConsolePublisher"]
