from enum import Enum

from pydantic import BaseModel, Field

from nestedset.tree.mutations import Position


class Relation(str, Enum):
    DESCENDANTS = "descendants"
    ANCESTORS = "ancestors"
    CHILDREN = "children"
    SIBLINGS = "siblings"


class CreateNodeRequest(BaseModel):
    label: str | None = None
    targetId: str | None = Field(None, description="Node the new node is placed relative to (null for the first root)")
    position: Position = Field(Position.LAST_CHILD, description="Placement relative to the target node")


class CreateNodeResponse(BaseModel):
    id: str
    label: str | None
    targetId: str | None
    position: Position


class NodeResponse(BaseModel):
    id: str
    left: int
    right: int
    depth: int
    size: int
    parentId: str | None


class TreeRowResponse(BaseModel):
    id: str
    left: int
    right: int
    depth: int


class NodeListResponse(BaseModel):
    id: str
    nodes: list[str]


class BulkNodeRequest(BaseModel):
    """Node for bulk load operation."""

    id: str = Field(..., description="Node ID")
    label: str | None = Field(None, description="Node label")
    parentId: str | None = Field(None, description="Parent node ID")


class MoveNodeRequest(BaseModel):
    """Request model for moving a node (with its subtree) relative to another node."""

    sourceId: str = Field(..., description="ID of the node to move")
    targetId: str = Field(..., description="ID of the node the source is placed relative to")
    position: Position = Field(Position.LAST_CHILD, description="Placement relative to the target node")


class MoveNodeResponse(BaseModel):
    """Response model for node move operation."""

    success: bool = Field(..., description="Whether the move operation was successful")
    message: str = Field(..., description="Status message")


class DeleteNodeResponse(BaseModel):
    deleted: int = Field(..., description="Number of rows removed (the node and its descendants)")
