"""Translate Make interface descriptors into MCP tool input schemas.

The descriptor is a tree of :class:`InterfaceField` nodes whose ``spec``
children arrive as raw JSON. Each type tag is handled by one entry in
``_TYPE_HANDLERS``; adding a descriptor type means adding one handler.
Traversal uses an explicit stack and children are validated one level at a
time, so arbitrarily deep descriptors hit no recursion limit.
"""

from typing import Any, Callable, Dict, List, Sequence, Tuple

from pydantic import ValidationError

from .errors import InternalError, UnsupportedTypeError
from .models import InterfaceField

Schema = Dict[str, Any]
# (descriptor node, schema dict to populate for it)
Pending = List[Tuple[InterfaceField, Schema]]
Handler = Callable[[InterfaceField, Schema], Pending]

WRAPPER_NAME = "wrapper"


def _as_field(raw: Any) -> InterfaceField:
    """Validate one descriptor node without descending into its ``spec``."""
    if isinstance(raw, InterfaceField):
        return raw
    if not isinstance(raw, dict):
        raise InternalError(f"Malformed interface node: expected an object, got {raw!r}")
    try:
        return InterfaceField.model_validate(raw)
    except ValidationError as e:
        raise InternalError(f"Malformed interface node {raw.get('name')!r}: {e}") from e


def _children(spec: Any) -> List[InterfaceField]:
    if spec is None:
        return []
    if isinstance(spec, (dict, InterfaceField)):
        return [_as_field(spec)]
    if isinstance(spec, list):
        return [_as_field(item) for item in spec]
    raise InternalError(f"Malformed interface spec: {spec!r}")


def _string_handler(fmt: str = "") -> Handler:
    def handle(field: InterfaceField, schema: Schema) -> Pending:
        schema["type"] = "string"
        if fmt:
            schema["format"] = fmt
        return []

    return handle


def _json_text(field: InterfaceField, schema: Schema) -> Pending:
    schema["type"] = "string"
    schema["contentMediaType"] = "application/json"
    return []


def _select(field: InterfaceField, schema: Schema) -> Pending:
    schema["type"] = "string"
    # options may also be an RPC reference string; only static lists map to enum
    if isinstance(field.options, list) and field.options:
        values = []
        for option in field.options:
            if isinstance(option, dict):
                if "value" in option:
                    values.append(option["value"])
            else:
                values.append(option)
        if values:
            schema["enum"] = values
    return []


def _number(field: InterfaceField, schema: Schema) -> Pending:
    schema["type"] = "number"
    return []


def _integer(field: InterfaceField, schema: Schema) -> Pending:
    schema["type"] = "integer"
    return []


def _unsigned_integer(field: InterfaceField, schema: Schema) -> Pending:
    schema["type"] = "integer"
    schema["minimum"] = 0
    return []


def _boolean(field: InterfaceField, schema: Schema) -> Pending:
    schema["type"] = "boolean"
    return []


def _object_from_fields(children: Sequence[InterfaceField], schema: Schema) -> Pending:
    """Fill ``schema`` as an object whose properties are ``children``."""
    properties: Dict[str, Schema] = {}
    required: List[str] = []
    pending: Pending = []
    for child in children:
        child_schema: Schema = {}
        # Insert now so property order mirrors declaration order
        properties[child.name] = child_schema
        if child.required:
            required.append(child.name)
        pending.append((child, child_schema))
    schema["type"] = "object"
    schema["properties"] = properties
    schema["required"] = required
    return pending


def _collection(field: InterfaceField, schema: Schema) -> Pending:
    return _object_from_fields(_children(field.spec), schema)


def _array(field: InterfaceField, schema: Schema) -> Pending:
    schema["type"] = "array"
    items: Schema = {}
    schema["items"] = items
    spec = field.spec
    if spec is None:
        return []
    if isinstance(spec, list):
        # A list of fields describes object elements
        return _object_from_fields(_children(spec), items)
    return [(_as_field(spec), items)]


_TYPE_HANDLERS: Dict[str, Handler] = {
    "text": _string_handler(),
    "string": _string_handler(),
    "filename": _string_handler(),
    "email": _string_handler("email"),
    "url": _string_handler("uri"),
    "date": _string_handler("date-time"),
    "json": _json_text,
    "select": _select,
    "number": _number,
    "integer": _integer,
    "uinteger": _unsigned_integer,
    "boolean": _boolean,
    "array": _array,
    "collection": _collection,
}


def supported_types() -> List[str]:
    """Descriptor type tags the remapper understands."""
    return sorted(_TYPE_HANDLERS)


def _apply_metadata(field: InterfaceField, schema: Schema) -> None:
    if field.label:
        schema["title"] = field.label
    if field.help:
        schema["description"] = field.help
    if field.default is not None:
        schema["default"] = field.default


def remap(field: InterfaceField) -> Schema:
    """Map a descriptor tree rooted at ``field`` to a JSON schema.

    Raises:
        UnsupportedTypeError: a node carries an unknown type tag.
        InternalError: a node or ``spec`` is not shaped like a descriptor.
    """
    root: Schema = {}
    stack: Pending = [(field, root)]
    while stack:
        node, schema = stack.pop()
        handler = _TYPE_HANDLERS.get(node.type or "")
        if handler is None:
            raise UnsupportedTypeError(
                node.name or "<unnamed>", node.type, supported_types()
            )
        children = handler(node, schema)
        _apply_metadata(node, schema)
        stack.extend(children)
    return root


def build_input_schema(inputs: Sequence[InterfaceField]) -> Schema:
    """Input schema for a scenario, wrapped in an object-shaped root."""
    wrapper = InterfaceField(name=WRAPPER_NAME, type="collection", spec=list(inputs))
    return remap(wrapper)
