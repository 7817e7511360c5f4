"""JSON Schema validation utilities."""

from typing import Any

from jsonschema import Draft7Validator


def validate_schema(data: Any, schema: dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate data against a JSON Schema.

    Args:
        data: The data to validate
        schema: JSON Schema to validate against

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    if not schema:
        return True, []

    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])

    if not errors:
        return True, []

    error_messages = [
        f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
        for e in errors
    ]

    return False, error_messages


def filter_to_schema(data: dict[str, Any], schema: dict[str, Any]) -> dict[str, Any]:
    """Drop top-level keys the schema does not declare."""
    declared = schema.get("properties", {})
    return {key: value for key, value in data.items() if key in declared}


def create_tool_schema(
    parameters: list[dict[str, Any]],
    required: list[str] | None = None
) -> dict[str, Any]:
    """
    Create a JSON Schema from a list of parameter definitions.

    Args:
        parameters: List of parameter definitions with name, type, description
        required: List of required parameter names

    Returns:
        JSON Schema dictionary
    """
    properties = {}

    # canonical JSON Schema type names used by the catalog
    known_types = {"string", "number", "array", "object"}

    for param in parameters:
        param_schema: dict[str, Any] = {
            "type": param["type"] if param.get("type") in known_types else "string",
            "description": param.get("description", ""),
        }

        for keyword in ("enum", "pattern", "format", "items", "properties", "required"):
            if keyword in param:
                param_schema[keyword] = param[keyword]

        properties[param["name"]] = param_schema

    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
    }

    if required is not None:
        schema["required"] = required
    else:
        schema["required"] = [
            p["name"] for p in parameters
            if not p.get("optional", False)
        ]

    return schema
