"""Serial port access for POSIX systems: configuration, I/O and port listing."""

__version__ = "0.1.0"