from collections.abc import Mapping

from ringhttp.coercion.base import CodecFactory, codec_key, resolve_mime
from ringhttp.request_execution.models import Request, Response
from ringhttp.request_execution.middleware.pipeline import (
    NEXT_CALL,
    Middleware,
    MiddlewareFactory,
    MiddlewareType,
)
from ringhttp.utils.params import (
    FORM_PARAMS,
    QUERY_PARAMS,
    flatten_nested,
    generate_query_string,
    resolve_flatten_keys,
)


FORM_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
DEFAULT_FORM_CODEC = "x-www-form-urlencoded"


@MiddlewareFactory.register(MiddlewareType.FLATTEN_NESTED_PARAMS)
class FlattenNestedParamsMiddleware(Middleware):
    """
    Resolve flatten_nested_keys from the legacy booleans and flatten nested
    mappings of the targeted param fields into parent[child] keys. Contradictory
    options raise ConfigurationError before anything is sent.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        keys = resolve_flatten_keys(
            request.flatten_nested_keys,
            request.ignore_nested_query_string,
            request.flatten_nested_form_params,
        )
        changes: dict = {
            "flatten_nested_keys": keys,
            "ignore_nested_query_string": False,
            "flatten_nested_form_params": False,
        }
        for field_name in (QUERY_PARAMS, FORM_PARAMS):
            params = getattr(request, field_name)
            if field_name in keys and isinstance(params, Mapping):
                changes[field_name] = flatten_nested(params)
        return await next_call(request.evolve(**changes))


@MiddlewareFactory.register(MiddlewareType.QUERY_PARAMS)
class QueryParamsMiddleware(Middleware):
    """
    Encode query_params into the query string. An existing query_string is
    extended with '&', never replaced.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if not request.query_params:
            return await next_call(request)

        encoded = generate_query_string(request.query_params, request.multi_param_style)
        query_string = f"{request.query_string}&{encoded}" if request.query_string else encoded
        return await next_call(request.evolve(query_string=query_string, query_params=None))


@MiddlewareFactory.register(MiddlewareType.FORM_PARAMS)
class FormParamsMiddleware(Middleware):
    """
    Encode form_params as the request body for POST, PUT, PATCH and DELETE.
    The content_type tag picks the codec and is replaced by the codec's MIME
    type. A content type with no registered codec is form encoded and kept as
    given. Other methods pass through untouched.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if not request.form_params or request.method_name.upper() not in FORM_METHODS:
            return await next_call(request)

        tag = request.content_type or DEFAULT_FORM_CODEC
        key = codec_key(tag)
        content_type = resolve_mime(key) if key is not None else tag
        body = CodecFactory.create(key or DEFAULT_FORM_CODEC).encode(request.form_params, request)

        return await next_call(
            request.evolve(body=body, content_type=content_type, form_params=None)
        )
