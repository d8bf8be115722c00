"""Base factory configuration for SQLAlchemy models."""

import factory
from sqlalchemy.orm import Session


class SQLAlchemyModelFactory(factory.Factory):
    """Base factory for SQLAlchemy models persisted through an explicit session."""

    class Meta:
        abstract = True

    @classmethod
    def create_in(cls, session: Session, **kwargs):
        """Create and flush an instance; the caller owns the transaction."""
        instance = cls.build(**kwargs)
        session.add(instance)
        session.flush()
        return instance

    @classmethod
    def create_batch_in(cls, session: Session, size: int, **kwargs):
        return [cls.create_in(session, **kwargs) for _ in range(size)]
