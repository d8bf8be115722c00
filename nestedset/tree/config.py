from typing import Any, Self

from pydantic import BaseModel, ConfigDict, field_validator

from nestedset.tree.errors import InvalidColumnNameError, InvalidRootNodeIdError, InvalidTableError


def check_column_name(name: Any) -> str:
    """Return ``name`` if it is usable as a column name."""
    if not isinstance(name, str) or not name:
        raise InvalidColumnNameError(name)
    return name


class NestedSetConfig(BaseModel):
    """
    Table and column names the engine builds its statements against.

    ``table`` is either a plain table name or a one-element mapping of
    ``{alias: table_name}``; the alias is then used in read queries.
    ``root_node_id`` left as None means the root is detected from the data.

    Instances are immutable. Use :meth:`replace` to derive a new one; the
    validators run again on the result.
    """

    model_config = ConfigDict(frozen=True)

    table: str | dict[str, str] = "nested_set"
    id_column: str = "id"
    left_column: str = "lft"
    right_column: str = "rgt"
    root_node_id: int | str | None = None

    @field_validator("table", mode="before")
    @classmethod
    def _check_table(cls, value: Any) -> Any:
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict) and len(value) == 1:
            ((alias, name),) = value.items()
            if isinstance(alias, str) and alias and isinstance(name, str) and name:
                return value
        raise InvalidTableError(value)

    @field_validator("id_column", "left_column", "right_column", mode="before")
    @classmethod
    def _check_column(cls, value: Any) -> str:
        return check_column_name(value)

    @field_validator("root_node_id", mode="before")
    @classmethod
    def _check_root_node_id(cls, value: Any) -> Any:
        if value is None or (isinstance(value, int) and not isinstance(value, bool)):
            return value
        if isinstance(value, str) and value:
            return value
        raise InvalidRootNodeIdError(value)

    @property
    def table_name(self) -> str:
        if isinstance(self.table, dict):
            return next(iter(self.table.values()))
        return self.table

    @property
    def table_alias(self) -> str | None:
        if isinstance(self.table, dict):
            return next(iter(self.table))
        return None

    @property
    def cache_key(self) -> tuple:
        table = (self.table_alias, self.table_name) if self.table_alias else self.table_name
        return (table, self.id_column, self.left_column, self.right_column)

    def replace(self, **changes: Any) -> Self:
        return type(self)(**{**self.model_dump(), **changes})
