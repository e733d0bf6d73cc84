"""Cluster connection exceptions."""


class ClusterError(Exception):
    """Raised when the cluster cannot provide a connection."""

    def __init__(self, pattern: str, message: str):
        self.pattern = pattern
        super().__init__(message)


class NoMatchingNodeError(ClusterError):
    """No configured node id matches the requested pattern."""

    def __init__(self, pattern: str):
        super().__init__(pattern, f"No cluster node matches pattern '{pattern}'")


class PoolExhaustedError(ClusterError):
    """A node pool had no free connection within the acquire timeout."""

    def __init__(self, node_id: str, timeout: float):
        self.node_id = node_id
        super().__init__(
            node_id,
            f"No free connection on node '{node_id}' after {timeout}s",
        )
