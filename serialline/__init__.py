"""Serial line configuration through termios and modem-control ioctls."""

__version__ = "0.1.0"
__all__ = ["lineconfig"]