import threading
from typing import Any


class SingletonMeta(type):
    """
    A metaclass that implements the Singleton design pattern.

    The first instantiation creates the instance, all later instantiation
    attempts return the same instance. Creation is guarded by a lock because
    sync and async callers may race to create the process-wide transport loop.

    Example:
        class TransportLoop(metaclass=SingletonMeta):
            ...

        assert TransportLoop() is TransportLoop()
    """
    _instances: dict[type, Any] = {}
    _lock = threading.Lock()

    def __call__(cls, *args, **kwargs) -> Any:
        if cls not in cls._instances:
            with cls._lock:
                if cls not in cls._instances:
                    cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]
