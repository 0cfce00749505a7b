from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PODMANAGER_", env_file=".env", extra="ignore")

    sentinel_config_file: str = Field("/etc/redis/sentinel.conf", description="Sentinel config file used as pod source")
    registry_url: Optional[str] = Field(None, description="Remote pod registry; when set it replaces the config file source")
    registry_timeout: float = Field(5.0, description="HTTP timeout for the remote registry in seconds", gt=0)
    connect_timeout: float = Field(2.0, description="Seconds allowed to open a node connection", gt=0)
    command_timeout: float = Field(5.0, description="Seconds allowed for a single node command", gt=0)
    topology_depth: Optional[int] = Field(2, description="Topology walk depth, null for full closure", ge=1)
    verify_primary_write: bool = Field(False, description="Check master parameter writes during rotation")
    host: str = Field("127.0.0.1", description="API bind address")
    port: int = Field(8026, description="API port number", gt=0, lt=65536)
    log_level: str = Field("INFO", description="Root log level")

    @property
    def use_registry(self) -> bool:
        return bool(self.registry_url)
