"""Pydantic models for JSON-RPC requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request model.

    Requests are frozen: stages that need different params build a copy with
    ``with_params`` so the caller's request is never mutated.
    """

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(default=1, description="Request ID")

    model_config = ConfigDict(frozen=True)

    def with_params(self, params: list[Any]) -> "JsonRpcRequest":
        """Return a copy of this request carrying different params."""
        return self.model_copy(update={"params": list(params)})


class JsonRpcErrorDetail(BaseModel):
    """Error object of a JSON-RPC 2.0 response."""

    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Short error description")
    data: Any = Field(default=None, description="Provider-specific details")


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response model."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    id: int | str | None = Field(default=None, description="Request ID")
    result: Any = Field(default=None, description="Result value")
    error: JsonRpcErrorDetail | None = Field(default=None, description="Error")

    model_config = ConfigDict(extra="allow")

    @property
    def has_result(self) -> bool:
        """Whether the provider sent a ``result`` member at all."""
        return "result" in self.model_fields_set


__all__ = [
    "JsonRpcErrorDetail",
    "JsonRpcRequest",
    "JsonRpcResponse",
]
