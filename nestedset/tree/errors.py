class NestedSetError(Exception):
    """Base class for every error raised by the tree engine."""


class ConfigurationError(NestedSetError):
    """Raised synchronously when a configuration value is rejected."""


class InvalidTableError(ConfigurationError):
    def __init__(self, table):
        super().__init__(f"Table must be a non-empty string or a one-element {{alias: name}} mapping, got {table!r}")


class InvalidColumnNameError(ConfigurationError):
    def __init__(self, name):
        super().__init__(f"Column name must be a non-empty string, got {name!r}")


class InvalidRootNodeIdError(ConfigurationError):
    def __init__(self, node_id):
        super().__init__(f"Root node id must be None, an int or a non-empty string, got {node_id!r}")


class StructuralError(NestedSetError, RuntimeError):
    """A required row is missing or the mutation would break the tree.

    Always raised before any write statement runs.
    """


class NodeNotFoundError(StructuralError):
    def __init__(self, node_id):
        self.node_id = node_id
        super().__init__(f"Node {node_id} not found")


class RootNotFoundError(StructuralError):
    def __init__(self, matches: int):
        self.matches = matches
        super().__init__(f"Expected exactly one root node, found {matches}")


class CyclicMoveError(StructuralError):
    def __init__(self, node_id, target_id):
        self.node_id = node_id
        self.target_id = target_id
        super().__init__(f"Cannot move node {node_id} relative to {target_id}: target is inside the moved subtree")


class InvalidPositionError(StructuralError):
    pass


class InvalidAdjacencyError(StructuralError):
    """An adjacency list cannot be numbered, or the table cannot take a bulk load."""
