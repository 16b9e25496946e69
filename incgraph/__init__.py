"""Include-graph builder and recompilation impact analyzer for C sources."""

__version__ = "0.1.0"
