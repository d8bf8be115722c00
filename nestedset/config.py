import os
from functools import lru_cache

from pydantic_settings import BaseSettings

from nestedset.tree.config import NestedSetConfig


class Settings(BaseSettings):
    # Application
    app_name: str = "Nested Set Tree API"
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = environment == "development"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./nested_set.db")

    # Tree table layout
    tree_table: str = "nested_set"
    tree_id_column: str = "id"
    tree_left_column: str = "lft"
    tree_right_column: str = "rgt"
    tree_root_node_id: int | None = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = {"env_file": ".env"}

    def tree_config(self) -> NestedSetConfig:
        return NestedSetConfig(
            table=self.tree_table,
            id_column=self.tree_id_column,
            left_column=self.tree_left_column,
            right_column=self.tree_right_column,
            root_node_id=self.tree_root_node_id,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
