"""Customer tools — CRUD over the downstream ``customers`` resource.

Arguments are validated with pydantic before any request is made; a
validation failure is a handler error and is never retried.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from mcpgate.protocols.registry import ToolRegistry
    from mcpgate.runtime.api_client import ApiClient

_ID_SCHEMA = {"type": "string", "description": "Customer identifier"}


class CustomerRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(..., min_length=1, alias="customerId")


class NewCustomer(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)


class CustomerUpdate(CustomerRef):
    name: str | None = None
    email: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(include={"name", "email"}, exclude_none=True)


def _path(customer_id: str) -> str:
    return f"customers/{quote(customer_id, safe='')}"


def register_customer_tools(registry: ToolRegistry, api: ApiClient) -> None:
    """Register ``get_customer``, ``create_customer``, ``update_customer`` and ``delete_customer``."""

    @registry.tool(
        "get_customer",
        "Retrieve a customer by id",
        {
            "type": "object",
            "properties": {"customerId": _ID_SCHEMA},
            "required": ["customerId"],
        },
    )
    async def get_customer(arguments: Mapping[str, Any]) -> Any:
        ref = CustomerRef.model_validate(dict(arguments))
        return await api.get(_path(ref.customer_id))

    @registry.tool(
        "create_customer",
        "Create a new customer",
        {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Full name"},
                "email": {"type": "string", "description": "Email address"},
            },
            "required": ["name", "email"],
        },
    )
    async def create_customer(arguments: Mapping[str, Any]) -> Any:
        customer = NewCustomer.model_validate(dict(arguments))
        return await api.post("customers", customer.model_dump())

    @registry.tool(
        "update_customer",
        "Update the name or email of an existing customer",
        {
            "type": "object",
            "properties": {
                "customerId": _ID_SCHEMA,
                "name": {"type": "string"},
                "email": {"type": "string"},
            },
            "required": ["customerId"],
        },
    )
    async def update_customer(arguments: Mapping[str, Any]) -> Any:
        update = CustomerUpdate.model_validate(dict(arguments))
        return await api.put(_path(update.customer_id), update.changes())

    @registry.tool(
        "delete_customer",
        "Delete a customer by id",
        {
            "type": "object",
            "properties": {"customerId": _ID_SCHEMA},
            "required": ["customerId"],
        },
    )
    async def delete_customer(arguments: Mapping[str, Any]) -> Any:
        ref = CustomerRef.model_validate(dict(arguments))
        deleted = await api.delete(_path(ref.customer_id))
        return {"customerId": ref.customer_id, "deleted": deleted}
