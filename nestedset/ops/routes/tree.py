from collections.abc import Generator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from nestedset.config import get_settings
from nestedset.lib.db.session import get_session
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
from nestedset.ops.services.tree_service import TreeService
from nestedset.tree.errors import NodeNotFoundError, RootNotFoundError, StructuralError

settings = get_settings()

router = APIRouter()


@contextmanager
def tree_errors(action: str) -> Generator[None, None, None]:
    """Map engine errors onto HTTP status codes."""
    try:
        yield
    except (NodeNotFoundError, RootNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{e}")
    except (StructuralError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Failed to {action}: {e}")


@router.get("", response_model=list[TreeRowResponse])
def list_tree(session: Session = Depends(get_session)):
    """Get every node below the root in pre-order, with its depth."""
    with tree_errors("list tree"):
        return TreeService(session).list_tree()


@router.get("/root")
def get_root(session: Session = Depends(get_session)):
    with tree_errors("resolve root"):
        return {"id": TreeService(session).root_id()}


@router.get("/{node_id}", response_model=NodeResponse)
def get_node(node_id: str, session: Session = Depends(get_session)):
    with tree_errors("get node"):
        return TreeService(session).get_node(node_id)


@router.get("/{node_id}/{relation}", response_model=NodeListResponse)
def get_related(
    node_id: str,
    relation: Relation,
    session: Session = Depends(get_session),
):
    """Ids of the node's descendants, ancestors, children or siblings, in tree order."""
    with tree_errors(f"list {relation.value}"):
        return TreeService(session).related(node_id, relation)


@router.post("", response_model=CreateNodeResponse, status_code=status.HTTP_201_CREATED)
def insert_node(request: CreateNodeRequest, session: Session = Depends(get_session)):
    """
    Insert a new leaf node relative to targetId.
    Creates the root if targetId is null and the tree is empty.
    """
    with tree_errors("insert node"):
        return TreeService(session).insert_node(request)


@router.post("/move", response_model=MoveNodeResponse, status_code=status.HTTP_200_OK)
def move_node(request: MoveNodeRequest, session: Session = Depends(get_session)):
    """Move a node and its subtree relative to targetId"""
    with tree_errors("move node"):
        return TreeService(session).move_node(request)


@router.delete("/{node_id}", response_model=DeleteNodeResponse)
def delete_node(node_id: str, session: Session = Depends(get_session)):
    """Delete a node together with all of its descendants."""
    with tree_errors("delete node"):
        return TreeService(session).delete_node(node_id)


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
def bulk_load(nodes: list[BulkNodeRequest], session: Session = Depends(get_session)):
    """
    Load an adjacency list with client-provided IDs into an empty tree.

    WARNING: This endpoint is for testing/development only, not for production use.
    Disabled in production environments.

    Expected format: [{"id": "1", "label": "root", "parentId": null}, ...]
    Client must ensure:
    - IDs are unique
    - Parents are listed before their children
    - Exactly one node has no parent
    """
    if settings.environment == "production":
        raise HTTPException(status_code=403, detail="Bulk load is disabled in production environments")

    with tree_errors("bulk load"):
        count = TreeService(session).bulk_load(nodes)

    return {"created": count}


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_tree(session: Session = Depends(get_session)):
    """
    Delete every node.

    WARNING: This endpoint is for testing/development only, not for production use.
    Disabled in production environments.
    """
    if settings.environment == "production":
        raise HTTPException(status_code=403, detail="Tree deletion is disabled in production environments")

    TreeService(session).delete_all()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
