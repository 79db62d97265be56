import logging
from pydantic import BaseModel, Field, field_validator
from typing import Annotated, Literal, TypeVar, Generic, Any, Union


T = TypeVar("T", bound=str)


class MiddlewareConfigModel(BaseModel, Generic[T]):
    type: T

    def to_runtime_args(self) -> dict[str, Any]:
        return {}


class SimpleMiddlewareModel(MiddlewareConfigModel):
    """Middleware that take no options"""
    type: Literal[
            "request_timing",
            "unknown_host",
            "url",
            "user_info",
            "basic_auth",
            "oauth",
            "flatten_nested_params",
            "query_params",
            "exceptions",
            "output_coercion",
            "decode_body_headers",
            "accept",
            "accept_encoding",
            "decompression",
            "form_params",
            "content_type",
            "input_coercion",
            "method",
    ]

    def to_runtime_args(self) -> dict[str, Any]:
        return super().to_runtime_args()


class LoggingMiddlewareModel(MiddlewareConfigModel):
    """Logging middleware configuration"""
    type: Literal["logging"] = "logging"
    level: str = "DEBUG"

    @field_validator("level")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown logging level: {value}")
        return level

    def to_runtime_args(self) -> dict[str, Any]:
        return {"level": logging.getLevelName(self.level)}


MiddlewareConfigUnion = Annotated[
    Union[
        SimpleMiddlewareModel,
        LoggingMiddlewareModel,
    ],
    Field(discriminator="type"),
]
