"""Factory for TreeNode model."""

from factory import Faker, LazyAttribute, Sequence
from sqlalchemy.orm import Session

from nestedset.ops.entities.tree_node import TreeNode
from nestedset.tree.mutations import NodeSpec, number_adjacency

from .base import SQLAlchemyModelFactory


class TreeNodeFactory(SQLAlchemyModelFactory):
    """Factory for creating TreeNode rows."""

    class Meta:
        model = TreeNode

    # Sensible defaults for a lone root
    id = Sequence(lambda n: n + 1)
    label = Faker("company")
    lft = 1
    rgt = LazyAttribute(lambda obj: obj.lft + 1)

    @classmethod
    def create_numbered_in(cls, session: Session, nodes: list[NodeSpec]) -> list[TreeNode]:
        """Persist an adjacency list with pre-order boundaries."""
        return [
            cls.create_in(session, id=node.id, lft=left, rgt=right, **node.values)
            for node, left, right in number_adjacency(nodes)
        ]
