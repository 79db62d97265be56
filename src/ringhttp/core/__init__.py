from ringhttp.core.abstract_factory import TypeAbstractFactory
from ringhttp.core.coroutine import EventLoopThread, TransportLoop
from ringhttp.core.singleton import SingletonMeta

__all__ = [
    "TypeAbstractFactory",
    "EventLoopThread",
    "TransportLoop",
    "SingletonMeta",
]
