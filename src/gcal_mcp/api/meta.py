from __future__ import annotations

from typing import Dict, List, Optional

from .registry import ApiFunction, get_api_functions, register_api


def describe_function(func: ApiFunction) -> Dict[str, object]:
    return {
        "name": func.name,
        "description": func.description,
        "category": func.category,
        "tags": list(func.tags),
        "parameters": func.parameter_schema,
    }


@register_api(
    "list_available_tools",
    description="List the MCP tools with their parameter schemas, optionally only one category (date, calendar, email, reminders, meta).",
    category="meta",
    tags=("tools", "metadata"),
)
def list_available_tools(category: Optional[str] = None) -> Dict[str, List[dict]]:
    functions = sorted(get_api_functions(category), key=lambda item: item.name)
    return {"tools": [describe_function(func) for func in functions]}
