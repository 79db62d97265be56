from pathlib import Path
from typing import Any, Literal
from pydantic import BaseModel, ConfigDict


class TlsConfig(BaseModel):
    enabled: bool = False
    verify: bool = True
    ca_bundle: Path | None = None
    client_cert: Path | None = None
    client_key: Path | None = None


class PoolConfig(BaseModel):
    """
    Options of a reusable connection pool.
    • timeout: seconds an idle pooled connection is kept alive
    • insecure: skip certificate verification for every connection of the pool
    • limit / limit_per_host: connection caps (0 means unlimited)
    • ttl_dns_cache: seconds resolved addresses are cached
    """
    model_config = ConfigDict(extra="forbid")

    timeout: float = 5.0
    insecure: bool = False
    limit: int = 100
    limit_per_host: int = 0
    ttl_dns_cache: int | None = 10
    tls: TlsConfig | None = None

    def to_runtime_args(self) -> dict[str, Any]:
        return {
            "keepalive_timeout": self.timeout,
            "insecure": self.insecure,
            "limit": self.limit,
            "limit_per_host": self.limit_per_host,
            "ttl_dns_cache": self.ttl_dns_cache,
            "tls": self.tls,
        }


class TransportEngineModel(BaseModel):
    """Base config for transport engine"""
    type: Literal["aiohttp"] = "aiohttp"

    def to_runtime_args(self) -> dict[str, Any]:
        return {}
