import json

from collections.abc import Mapping

from cbor2 import loads, CBORTag


def diagnose(encoded: bytes) -> str:
    """
    Render CBOR bytes in diagnostic notation (RFC 8949 section 8),
    e.g. {1: 2, -2: h'aabb'}
    """

    return _render(loads(encoded))


def _render(value) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    if isinstance(value, (bytes, bytearray)):
        return f"h'{bytes(value).hex()}'"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        items = ', '.join(f'{_render(k)}: {_render(v)}' for k, v in value.items())
        return '{' + items + '}'
    if isinstance(value, (list, tuple)):
        return '[' + ', '.join(_render(v) for v in value) + ']'
    if isinstance(value, CBORTag):
        return f'{value.tag}({_render(value.value)})'

    return repr(value)
