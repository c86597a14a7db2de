"""Argument models for the tools and prompts exposed by the MCP server.

Each model is both the JSON schema advertised to clients and the validator
applied to incoming arguments before a handler runs.
"""

from typing import Any, Dict, List, Optional, Type

from pydantic import AnyUrl, BaseModel, Field


class EchoMessageArgs(BaseModel):
    """echo_message tool arguments."""

    message: str = Field(..., description="要回显的文本消息")


class SendGetRequestArgs(BaseModel):
    """send-get-request tool arguments."""

    uri: AnyUrl = Field(..., description="完整的请求URL")
    params: Dict[str, Any] = Field(..., description="请求参数对象，如 {id: 1}")
    headers: Optional[Dict[str, str]] = Field(None, description="请求头信息")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "uri": "https://api.example.com/items",
                    "params": {"id": 1},
                    "headers": {"Accept": "application/json"},
                }
            ]
        }
    }


class GenerateSloganArgs(BaseModel):
    """generate_slogan prompt arguments."""

    theme: str = Field(..., description="口号的主题，例如“环保”或“创新”")


def input_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """JSON schema advertised as a tool's ``inputSchema``."""
    return model.model_json_schema()


def prompt_arguments(model: Type[BaseModel]) -> List[Dict[str, Any]]:
    """Describe a prompt model's fields as MCP prompt arguments.

    Returns:
        List of ``{"name", "description", "required"}`` dictionaries in field order
    """
    return [
        {
            "name": name,
            "description": field.description or "",
            "required": field.is_required(),
        }
        for name, field in model.model_fields.items()
    ]
