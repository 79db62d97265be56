from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field

from ringhttp.config.models.middleware import MiddlewareConfigUnion
from ringhttp.config.models.transport import PoolConfig, TransportEngineModel


class RequestDefaultsModel(BaseModel):
    """
    Request options applied to every request of a configured client. Only the
    options that make sense in a file are accepted; everything else is given
    per request.
    """
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    as_: str | None = Field(default=None, alias="as")
    coerce: Literal["unexceptional", "always", "exceptional"] | None = None
    accept: str | None = None
    content_type: str | None = None
    character_encoding: str | None = None
    accept_encoding: list[str] | None = None
    headers: dict[str, str] | None = None
    multi_param_style: Literal["repeat", "indexed", "array"] | None = None
    throw_exceptions: bool | None = None
    throw_entire_message: bool | None = None
    decompress_body: bool | None = None
    decode_body_headers: bool | None = None
    ignore_unknown_host: bool | None = None
    insecure: bool | None = None
    follow_redirects: bool | None = None
    max_redirects: int | None = None
    socket_timeout: float | None = None
    connection_timeout: float | None = None
    oauth_token: str | None = None

    def to_runtime_args(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ClientConfig(BaseModel):
    """
    Complete client configuration that can be loaded from JSON or YAML.
    Without a middleware section the default pipeline is used; a pool
    section makes the client send everything through one reusable pool.
    """
    defaults: RequestDefaultsModel = Field(default_factory=RequestDefaultsModel)
    transport: TransportEngineModel = Field(default_factory=TransportEngineModel)
    pool: PoolConfig | None = None
    middleware: list[MiddlewareConfigUnion] | None = None
