class DijkstraError(Exception):
    pass


class ConfigError(DijkstraError):
    """Worker count, vertex count or source vertex do not fit together."""


class InputFormatError(DijkstraError):
    """The adjacency matrix is malformed or contains a negative weight."""


class CollectiveProtocolError(DijkstraError):
    """A worker fell out of step with the per-round reduction."""
