"""File sending between two TCP peers: header format, transfer helpers and sessions."""

__version__ = "0.1.0"
__all__ = ["protocol", "transfer", "session"]