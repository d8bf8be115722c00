import logging

from sqlalchemy.orm import Session

from nestedset.config import Settings, get_settings
from nestedset.lib.db.transaction import transaction
from nestedset.ops.schemas import (
    BulkNodeRequest,
    CreateNodeRequest,
    CreateNodeResponse,
    DeleteNodeResponse,
    MoveNodeRequest,
    MoveNodeResponse,
    NodeListResponse,
    NodeResponse,
    Relation,
    TreeRowResponse,
)
from nestedset.tree.mutations import NodeSpec
from nestedset.tree.nested_set import NestedSet

logger = logging.getLogger(__name__)


def parse_node_id(value: str) -> int:
    """Node ids travel as strings over HTTP and are integers in the table."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid node id {value!r}")


def build_specs_for_bulk_load(nodes: list[BulkNodeRequest]) -> list[NodeSpec]:
    """Convert bulk request entries into the adjacency list the engine numbers."""
    return [
        NodeSpec(
            id=parse_node_id(node.id),
            parent_id=parse_node_id(node.parentId) if node.parentId else None,
            values={"label": node.label},
        )
        for node in nodes
    ]


class TreeService:
    def __init__(self, session: Session, settings: Settings | None = None):
        settings = settings or get_settings()
        self.session = session
        self.tree = NestedSet(session, settings.tree_config())

    def list_tree(self) -> list[TreeRowResponse]:
        """Every node except the root, in pre-order."""
        return [
            TreeRowResponse(id=f"{row.id}", left=row.left, right=row.right, depth=row.depth)
            for row in self.tree.tree()
        ]

    def root_id(self) -> str:
        return f"{self.tree.root_id()}"

    def get_node(self, node_id: str) -> NodeResponse:
        queries = self.tree.queries
        with transaction(self.session):
            bounds = queries.bounds(parse_node_id(node_id))
            parent_id = queries.parent_of(bounds)
            depth = queries.depth(bounds.id)

        return NodeResponse(
            id=f"{bounds.id}",
            left=bounds.left,
            right=bounds.right,
            depth=depth,
            size=bounds.size,
            parentId=None if parent_id is None else f"{parent_id}",
        )

    def related(self, node_id: str, relation: Relation) -> NodeListResponse:
        lookups = {
            Relation.DESCENDANTS: self.tree.descendants,
            Relation.ANCESTORS: self.tree.ancestors,
            Relation.CHILDREN: self.tree.children,
            Relation.SIBLINGS: self.tree.siblings,
        }
        ids = lookups[relation](parse_node_id(node_id))
        return NodeListResponse(id=node_id, nodes=[f"{related_id}" for related_id in ids])

    def insert_node(self, request: CreateNodeRequest) -> CreateNodeResponse:
        target_id = parse_node_id(request.targetId) if request.targetId else None
        values = {"label": request.label} if request.label is not None else {}
        node_id = self.tree.insert(target_id, request.position, values)
        return CreateNodeResponse(
            id=f"{node_id}", label=request.label, targetId=request.targetId, position=request.position
        )

    def move_node(self, request: MoveNodeRequest) -> MoveNodeResponse:
        self.tree.move(parse_node_id(request.sourceId), parse_node_id(request.targetId), request.position)
        return MoveNodeResponse(
            success=True,
            message=f"Successfully moved node {request.sourceId} {request.position.value} of {request.targetId}",
        )

    def delete_node(self, node_id: str) -> DeleteNodeResponse:
        return DeleteNodeResponse(deleted=self.tree.delete(parse_node_id(node_id)))

    def bulk_load(self, nodes: list[BulkNodeRequest]) -> int:
        """
        Load nodes with client-provided IDs into an empty tree.

        WARNING: For testing/development only. Parents must be listed before
        their children and exactly one node may have no parent.
        """
        return self.tree.bulk_load(build_specs_for_bulk_load(nodes))

    def delete_all(self) -> int:
        """
        Delete every node.

        WARNING: For testing/development only.
        """
        return self.tree.clear()
