from dataclasses import dataclass, field
from pathlib import Path

from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, Field

from src import ROOT


@dataclass(slots=True, kw_only=True)
class DatabaseConfig:
    pool_size: int = field(default=5, metadata={"description": "Number of connections kept in the pool"})
    max_overflow: int = field(default=0, metadata={"description": "Extra connections allowed above pool_size"})
    pool_timeout: int = field(default=30, metadata={"description": "Seconds to wait for a free connection"})
    pool_recycle: int = field(default=1800, metadata={"description": "Recycle connections after N seconds"})
    pool_pre_ping: bool = field(default=True, metadata={"description": "Test connections before use"})
    expire_on_commit: bool = field(
        default=False, metadata={"description": "Expire ORM objects after commit"}
    )


@dataclass(slots=True, kw_only=True)
class MigrationConfig:
    """Alembic configuration class."""

    script_location: str = field(
        default="alembic", metadata={"description": "Migration scripts directory, relative to the project root."}
    )
    version_table: str = field(
        default="alembic_version", metadata={"description": "Table recording applied revisions."}
    )

    @property
    def script_path(self) -> Path:
        path = Path(self.script_location)
        return path if path.is_absolute() else PROJECT_ROOT / path


@dataclass(slots=True, kw_only=True)
class CLIConfig:
    """Task CLI configuration class."""

    datetime_format: str = field(
        default="%Y-%m-%d %H:%M:%S", metadata={"description": "Format used to display timestamps."}
    )
    list_limit: int = field(default=100, metadata={"description": "Maximum number of tasks listed."})


class AppConfig(BaseModel):
    """Application configuration with validation."""

    database_config: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Configuration settings for the database pool"
    )
    migration_config: MigrationConfig = Field(
        default_factory=MigrationConfig, description="Configuration settings for schema migrations"
    )
    cli_config: CLIConfig = Field(default_factory=CLIConfig, description="Configuration settings for the CLI")


PROJECT_ROOT: Path = ROOT.parent
config_path: Path = ROOT / "config/config.yaml"
config: DictConfig = OmegaConf.load(config_path).config
resolved_cfg = OmegaConf.to_container(config, resolve=True)
app_config: AppConfig = AppConfig(**dict(resolved_cfg))  # type: ignore
