from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from ringhttp.core.abstract_factory import TypeAbstractFactory

if TYPE_CHECKING:
    from ringhttp.request_execution.models import Request


class BodyCodec(ABC):
    """
    A body format the client can write (form params) and read (response
    coercion). Codecs are looked up by their registry key, which is also the
    tag callers use for content_type, accept and as_.
    """

    mime_type: ClassVar[str]
    # Lower values are tried first when as_="auto" inspects Content-Type.
    priority: ClassVar[int] = 100

    @abstractmethod
    def encode(self, value: Any, request: Request) -> str | bytes:
        ...

    @abstractmethod
    def decode(self, data: bytes, charset: str, request: Request) -> Any:
        ...

    def matches(self, mime: str) -> bool:
        return mime == self.mime_type


class CodecFactory(TypeAbstractFactory[str, BodyCodec]):
    """Registry for body codecs"""
    ...


register_codec = CodecFactory.register


def resolve_mime(tag: str) -> str:
    """
    Map a format tag to its MIME type. Registered tags use the codec's MIME,
    strings that already look like a MIME type pass through, anything else
    becomes application/<tag>.
    """
    if CodecFactory.is_registered(tag):
        return CodecFactory.get(tag).mime_type
    if "/" in tag:
        return tag
    return f"application/{tag}"


def mime_of(content_type: str | None) -> str | None:
    """Strip parameters from a Content-Type header value."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def detect_codec(content_type: str | None) -> str | None:
    """Return the key of the codec that reads ``content_type``, if any."""
    mime = mime_of(content_type)
    if mime is None:
        return None
    keys = sorted(CodecFactory.list_keys(), key=lambda k: CodecFactory.get(k).priority)
    for key in keys:
        if CodecFactory.create(key).matches(mime):
            return key
    return None


def codec_key(tag: str | None) -> str | None:
    """Resolve a format tag or a MIME type to a registered codec key."""
    if not tag:
        return None
    if CodecFactory.is_registered(tag):
        return tag
    return detect_codec(tag)
