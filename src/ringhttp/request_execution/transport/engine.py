import asyncio
import io
import logging
import socket
from typing import Any

from aiohttp import (
    ClientConnectorDNSError,
    ClientConnectorError,
    ClientError,
    ClientSession,
    ClientTimeout,
    TCPConnector,
    TraceConfig,
)
from multidict import CIMultiDict, CIMultiDictProxy
from yarl import URL

from ringhttp.core.exceptions import (
    MissingHostError,
    RequestTimeoutError,
    TransportError,
    UnknownHostError,
)
from ringhttp.request_execution.models import ProtocolVersion, Request, Response
from ringhttp.request_execution.transport.base import (
    TransportEngine,
    TransportEngineFactory,
    TransportEngineType,
)
from ringhttp.utils.url import parse_url


def request_url(request: Request) -> URL:
    """
    Assemble scheme://server_name[:port]uri[?query_string]. The uri and query
    string were normalized upstream, so yarl must not encode them again.
    """
    scheme, server_name, server_port = request.scheme, request.server_name, request.server_port
    uri, query_string = request.uri, request.query_string
    if not server_name:
        if not request.url:
            raise MissingHostError()
        parsed = parse_url(request.url)
        scheme, server_name, server_port = parsed.scheme, parsed.server_name, parsed.server_port
        uri, query_string = parsed.uri, parsed.query_string or query_string
    if not server_name:
        raise MissingHostError()

    host = f"[{server_name}]" if ":" in server_name else server_name
    port = f":{server_port}" if server_port else ""
    query = f"?{query_string}" if query_string else ""
    return URL(f"{scheme}://{host}{port}{uri or '/'}{query}", encoded=True)


class SocketCapture:
    """
    Rebuild the bytes written for a request from aiohttp's trace hooks: the
    request line and headers once they are sent, then every body chunk.
    Only the last hop of a redirect chain is kept.
    """

    def __init__(self) -> None:
        self._head = b""
        self._chunks: list[bytes] = []
        self.config = TraceConfig()
        self.config.on_request_headers_sent.append(self._on_headers_sent)
        self.config.on_request_chunk_sent.append(self._on_chunk_sent)

    async def _on_headers_sent(self, session: ClientSession, ctx: Any, params: Any) -> None:
        lines = [f"{params.method} {params.url.raw_path_qs} HTTP/1.1"]
        lines.extend(f"{name}: {value}" for name, value in params.headers.items())
        self._head = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")
        self._chunks = []

    async def _on_chunk_sent(self, session: ClientSession, ctx: Any, params: Any) -> None:
        self._chunks.append(bytes(params.chunk))

    @property
    def data(self) -> bytes:
        return self._head + b"".join(self._chunks)


@TransportEngineFactory.register(TransportEngineType.AIOHTTP)
class AiohttpEngine(TransportEngine):
    """
    Terminal transport backed by aiohttp. Requests carrying a pool handle go
    through the pool's session and keep their connection alive; every other
    request gets a one-shot session that closes its connection and announces
    it with "Connection: close". Bodies are returned undecoded.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)

    def _request_kwargs(self, request: Request) -> dict[str, Any]:
        headers = CIMultiDict(request.headers)
        if request.length is not None:
            headers["Content-Length"] = str(request.length)

        kwargs: dict[str, Any] = {
            "headers": headers,
            "data": request.body,
            "allow_redirects": request.follow_redirects,
            "max_redirects": request.max_redirects,
            "timeout": ClientTimeout(
                sock_connect=request.connection_timeout,
                sock_read=request.socket_timeout,
            ),
        }
        # aiohttp would otherwise offer gzip/deflate on its own
        if "Accept-Encoding" not in headers:
            kwargs["skip_auto_headers"] = ("Accept-Encoding",)
        if request.insecure:
            kwargs["ssl"] = False
        return kwargs

    async def send(self, request: Request) -> Response:
        url = request_url(request)
        kwargs = self._request_kwargs(request)
        manager = request.connection_manager
        host = request.server_name or url.host

        try:
            if manager is not None:
                return await self._exchange(manager.session, request, url, kwargs)

            kwargs["headers"]["Connection"] = "close"
            capture = SocketCapture() if request.capture_socket else None
            async with ClientSession(
                connector=TCPConnector(force_close=True, ssl=not request.insecure),
                auto_decompress=False,
                trace_configs=[capture.config] if capture else None,
            ) as session:
                response = await self._exchange(session, request, url, kwargs)
            if capture is not None:
                raw = capture.data
                response = response.evolve(
                    raw_socket_bytes=raw,
                    raw_socket_str=raw.decode("utf-8", errors="replace"),
                )
            return response
        except ClientConnectorError as exc:
            if isinstance(exc, ClientConnectorDNSError) or isinstance(exc.os_error, socket.gaierror):
                raise UnknownHostError(host) from exc
            raise TransportError(f"{type(exc).__name__}: {exc}", host=host) from exc
        except asyncio.TimeoutError as exc:
            raise RequestTimeoutError(f"request to {url} timed out", host=host) from exc
        except ClientError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}", host=host) from exc

    async def _exchange(
        self,
        session: ClientSession,
        request: Request,
        url: URL,
        kwargs: dict[str, Any],
    ) -> Response:
        self._logger.debug(f"{request.method_name} {url}")
        async with session.request(request.method_name, url, **kwargs) as response:
            body = await response.read()
            version = response.version
            return Response(
                status=response.status,
                headers=CIMultiDictProxy(CIMultiDict(response.headers)),
                body=io.BytesIO(body),
                reason_phrase=response.reason,
                protocol_version=ProtocolVersion("HTTP", version.major, version.minor) if version else None,
                connection_manager=request.connection_manager,
                request=request,
            )
