"""Adjacency-list generators for sample trees, ready for bulk loading."""

from nestedset.tree.mutations import NodeSpec


def linear_chain(start_id: int, depth: int, prefix: str = "D") -> list[NodeSpec]:
    """Every node is the only child of the previous one."""
    return [
        NodeSpec(id=start_id + i, parent_id=start_id + i - 1 if i > 0 else None, values={"label": f"{prefix}{i}"})
        for i in range(depth)
    ]


def star_tree(start_id: int, width: int, prefix: str = "W") -> list[NodeSpec]:
    """A root with ``width`` leaf children."""
    nodes = [NodeSpec(id=start_id, values={"label": f"{prefix}0"})]
    nodes.extend(
        NodeSpec(id=start_id + i, parent_id=start_id, values={"label": f"{prefix}{i}"}) for i in range(1, width + 1)
    )
    return nodes


def balanced_tree(start_id: int, total_nodes: int, branching: int = 3) -> list[NodeSpec]:
    """Breadth-first filled tree where every inner node has ``branching`` children."""
    if total_nodes <= 0:
        return []

    nodes = [NodeSpec(id=start_id, values={"label": "B0"})]
    parents = [start_id]
    while len(nodes) < total_nodes:
        parent_id = parents.pop(0)
        for _ in range(branching):
            if len(nodes) >= total_nodes:
                break
            node_id = start_id + len(nodes)
            nodes.append(NodeSpec(id=node_id, parent_id=parent_id, values={"label": f"B{len(nodes)}"}))
            parents.append(node_id)

    return nodes
