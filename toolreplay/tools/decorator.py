"""
@tool decorator - turn a typed function into a ToolDefinition.

The argument schema is read from the signature: each parameter becomes a
property, typed from its annotation and described by ``Annotated[T, "..."]``
metadata. Parameters without a default that are not ``Optional`` are required.
The first docstring line becomes the tool description.

Usage::

    from typing import Annotated
    from toolreplay.tools import tool

    @tool(name="doSomething")
    def do_something(content: Annotated[str, "the content"]) -> str:
        \"\"\"Invoked by the LLM.\"\"\"
        return "ignored"

    registry.register(do_something)
"""

from __future__ import annotations

import inspect
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .models import ToolDefinition

_NoneType = type(None)

_PRIMITIVES = {
    bool: "boolean",
    int: "integer",
    float: "number",
    str: "string",
}

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def _unwrap(annotation: Any) -> Tuple[Any, Optional[str], bool]:
    """Split an annotation into (inner type, Annotated description, optional flag)."""
    description = None
    if get_origin(annotation) is Annotated:
        annotation, *metadata = get_args(annotation)
        description = next((m for m in metadata if isinstance(m, str)), None)

    optional = False
    if get_origin(annotation) is Union and _NoneType in get_args(annotation):
        optional = True
        rest = [a for a in get_args(annotation) if a is not _NoneType]
        if len(rest) == 1:
            annotation = rest[0]

    return annotation, description, optional


def _json_schema_for(annotation: Any) -> Dict[str, Any]:
    """JSON Schema for a single annotation; unknown types map to string."""
    tp, _, _ = _unwrap(annotation)
    origin = get_origin(tp)

    if tp in _PRIMITIVES:
        return {"type": _PRIMITIVES[tp]}
    if tp is list or origin is list:
        schema: Dict[str, Any] = {"type": "array"}
        item_args = get_args(tp)
        if item_args:
            schema["items"] = _json_schema_for(item_args[0])
        return schema
    if tp is dict or origin is dict:
        return {"type": "object"}
    return {"type": "string"}


def _accepted_parameters(func: Callable) -> List[inspect.Parameter]:
    return [p for p in inspect.signature(func).parameters.values() if p.kind not in _SKIPPED_KINDS]


def _parameters_schema(func: Callable) -> Dict[str, Any]:
    """Object schema describing the keyword arguments of *func*."""
    try:
        hints = get_type_hints(func, include_extras=True)
    except (NameError, TypeError):
        hints = {}

    properties: Dict[str, Any] = {}
    required: List[str] = []
    for param in _accepted_parameters(func):
        annotation = hints.get(param.name, param.annotation)
        if annotation is inspect.Parameter.empty:
            annotation = str

        prop = _json_schema_for(annotation)
        _, description, optional = _unwrap(annotation)
        if description:
            prop["description"] = description
        properties[param.name] = prop

        if param.default is inspect.Parameter.empty and not optional:
            required.append(param.name)

    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _make_executor(func: Callable) -> Callable:
    """Adapt *func* to ``executor(args: dict)``; unknown keys are dropped."""
    names = [p.name for p in _accepted_parameters(func)]

    def select(args: Dict[str, Any]) -> Dict[str, Any]:
        return {n: args[n] for n in names if n in args}

    if inspect.iscoroutinefunction(func):
        async def run_async(args: Dict[str, Any]) -> Any:
            return await func(**select(args))
        return run_async

    def run(args: Dict[str, Any]) -> Any:
        return func(**select(args))
    return run


def tool(
    func: Optional[Callable] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Any:
    """Build a :class:`ToolDefinition` from *func*.

    Works as ``@tool``, as ``@tool(name=..., description=...)`` and as a plain
    call on a bound method: ``tool(obj.method)``.
    """

    def build(fn: Callable) -> ToolDefinition:
        doc = inspect.getdoc(fn)
        summary = doc.splitlines()[0].strip() if doc else None
        return ToolDefinition(
            name=name or fn.__name__,
            description=description or summary or name or fn.__name__,
            parameters=_parameters_schema(fn),
            executor=_make_executor(fn),
        )

    return build(func) if func is not None else build
