from typing import Generic, Callable, TypeVar, Hashable, ClassVar

from ringhttp.core.exceptions import ConfigurationError


K = TypeVar("K", bound=Hashable)
T = TypeVar("T")
TypeMap = dict[K, type[T]]


class TypeAbstractFactory(Generic[K, T]):
    """
    Generic abstract factory that maps keys to class types. Each subclass owns
    its own registry, so middleware and codecs never share keys.
    """

    _registry: ClassVar[TypeMap] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry = {}

    @classmethod
    def register(cls, key: K) -> Callable[[type[T]], type[T]]:
        """
        Decorator for registering a concrete implementation type. Registering an
        existing key replaces the previous implementation.
        """
        def wrapper(impl: type[T]) -> type[T]:
            cls._registry[key] = impl
            return impl

        return wrapper

    @classmethod
    def list_keys(cls) -> list[K]:
        return list(cls._registry.keys())

    @classmethod
    def is_registered(cls, key: K) -> bool:
        return key in cls._registry

    @classmethod
    def get(cls, key: K) -> type[T]:
        try:
            return cls._registry[key]
        except KeyError:
            raise ConfigurationError(
                f"{cls.__name__}: no implementation registered for {key!r}"
            ) from None

    @classmethod
    def create(cls, key: K, *args, **kwargs) -> T:
        return cls.get(key)(*args, **kwargs)
