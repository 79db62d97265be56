from abc import ABC, abstractmethod
from enum import Enum

from ringhttp.core.abstract_factory import TypeAbstractFactory
from ringhttp.request_execution.models import Request, Response


class TransportEngineType(str, Enum):
    AIOHTTP = "aiohttp"


class TransportEngine(ABC):
    """
    A structural interface that defines a pluggable HTTP engine abstraction.
    The engine is the terminal of every pipeline: it performs a single HTTP
    request described by a fully processed Request and returns a Response
    whose body is a byte stream. Connection failures are raised as
    TransportError subclasses, never returned.
    """

    @abstractmethod
    async def send(self, request: Request) -> Response:
        ...


class TransportEngineFactory(TypeAbstractFactory[TransportEngineType, TransportEngine]):
    pass
