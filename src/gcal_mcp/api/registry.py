from __future__ import annotations

import inspect
import types
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union, get_args, get_origin

JsonSchema = Dict[str, Any]

_SCALAR_TYPES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "object",
    list: "array",
}


def _json_schema(annotation: Any) -> JsonSchema:
    origin = get_origin(annotation)
    if origin is None:
        return {"type": _SCALAR_TYPES.get(annotation, "string")}
    if origin in (list, List):
        args = get_args(annotation)
        return {"type": "array", "items": _json_schema(args[0]) if args else {}}
    if origin in (dict, Dict):
        return {"type": "object"}
    if origin in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        return _json_schema(args[0]) if args else {"type": "string"}
    return {"type": "string"}


def _parameter_schema(param: inspect.Parameter) -> JsonSchema:
    schema = _json_schema(param.annotation)
    default = param.default
    if default is not inspect.Parameter.empty and default is not None:
        if isinstance(default, (str, int, float, bool)):
            schema["default"] = default
    return schema


@dataclass(frozen=True)
class ApiFunction:
    name: str
    func: Callable[..., Any]
    description: str
    category: str
    tags: tuple[str, ...]
    signature: inspect.Signature

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.func)

    @property
    def parameter_schema(self) -> JsonSchema:
        schema: JsonSchema = {"type": "object", "properties": {}, "required": []}
        for param in self.signature.parameters.values():
            schema["properties"][param.name] = _parameter_schema(param)
            if param.default is inspect.Parameter.empty:
                schema["required"].append(param.name)
        if not schema["required"]:
            schema.pop("required")
        return schema


REGISTRY: Dict[str, ApiFunction] = {}


def register_api(
    name: str,
    *,
    description: str,
    category: str,
    tags: Optional[Iterable[str]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if name in REGISTRY:
            raise ValueError(f"API function '{name}' is already registered.")
        REGISTRY[name] = ApiFunction(
            name=name,
            func=func,
            description=description,
            category=category,
            tags=tuple(tags or ()),
            signature=inspect.signature(func, eval_str=True),
        )
        return func

    return decorator


def get_api_functions(category: Optional[str] = None) -> List[ApiFunction]:
    functions = list(REGISTRY.values())
    if category is None:
        return functions
    return [func for func in functions if func.category == category]


def get_api_function(name: str) -> ApiFunction:
    if name not in REGISTRY:
        raise KeyError(f"API function '{name}' is not registered.")
    return REGISTRY[name]


async def call_api(name: str, **kwargs: Any) -> Any:
    """Invoke a registered function, awaiting it when it is a coroutine."""

    result = get_api_function(name).func(**kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
