from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterable, Iterator
from urllib.parse import parse_qsl

from ringhttp.core.exceptions import ConfigurationError
from ringhttp.utils.url import url_encode


QUERY_PARAMS = "query_params"
FORM_PARAMS = "form_params"

FLATTEN_CONFLICT_MESSAGE = (
    "only flatten_nested_keys or "
    "ignore_nested_query_string/flatten_nested_form_params may be specified, not both"
)


class MultiParamStyle(str, Enum):
    REPEAT = "repeat"      # a=1&a=2
    INDEXED = "indexed"    # a[0]=1&a[1]=2
    ARRAY = "array"        # a[]=1&a[]=2


def _is_multi(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _expand(key: str, values: Iterable[Any], style: MultiParamStyle) -> Iterator[tuple[str, Any]]:
    for index, value in enumerate(values):
        if style is MultiParamStyle.INDEXED:
            yield f"{key}[{index}]", value
        elif style is MultiParamStyle.ARRAY:
            yield f"{key}[]", value
        else:
            yield key, value


def generate_query_string(
    params: Mapping[str, Any],
    style: MultiParamStyle | str = MultiParamStyle.REPEAT,
    encoding: str = "UTF-8",
) -> str:
    """
    Encode params as a query string. Sequence values emit one pair per element
    following the multi-param style; None values emit ``key=``.
    """
    style = MultiParamStyle(style)
    pairs: list[str] = []
    for key, value in params.items():
        items = _expand(str(key), value, style) if _is_multi(value) else [(str(key), value)]
        for name, item in items:
            encoded_value = "" if item is None else url_encode(item, encoding)
            # brackets produced by the multi-param styles and by flattening stay readable
            pairs.append(f"{url_encode(name, encoding, safe='[]')}={encoded_value}")
    return "&".join(pairs)


def flatten_nested(params: Mapping[str, Any], prefix: str | None = None) -> dict[str, Any]:
    """Flatten nested mappings into ``parent[child]`` keys, at any depth."""
    flat: dict[str, Any] = {}
    for key, value in params.items():
        name = str(key) if prefix is None else f"{prefix}[{key}]"
        if isinstance(value, Mapping):
            flat.update(flatten_nested(value, name))
        else:
            flat[name] = value
    return flat


def resolve_flatten_keys(
    flatten_nested_keys: Iterable[str] | None,
    ignore_nested_query_string: bool = False,
    flatten_nested_form_params: bool = False,
) -> tuple[str, ...]:
    """
    Expand the two legacy booleans into the list of param fields to flatten.
    They are sugar for the explicit list, so combining them is an error.
    """
    if flatten_nested_keys is not None:
        if ignore_nested_query_string or flatten_nested_form_params:
            raise ConfigurationError(FLATTEN_CONFLICT_MESSAGE)
        return tuple(flatten_nested_keys)

    keys: list[str] = []
    if not ignore_nested_query_string:
        keys.append(QUERY_PARAMS)
    if flatten_nested_form_params:
        keys.append(FORM_PARAMS)
    return tuple(keys)


def form_decode(text: str, encoding: str = "UTF-8") -> dict[str, Any]:
    """Decode a form body. Repeated keys collect into a list."""
    decoded: dict[str, Any] = {}
    for key, value in parse_qsl(text, keep_blank_values=True, encoding=encoding):
        if key in decoded:
            current = decoded[key]
            decoded[key] = [*current, value] if isinstance(current, list) else [current, value]
        else:
            decoded[key] = value
    return decoded
