"""Socket and port monitoring for Linux: collect, filter and display TCP/UDP connections."""

__version__ = "1.0.1"
__all__ = ["cli", "connections", "schemas", "table", "utils"]