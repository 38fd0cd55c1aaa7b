"""Request bodies and the JSON response envelope.

Clients speak camelCase; the application layer speaks snake_case. Request
models accept the camelCase alias (or the field name), and ``camelize``
turns outgoing DTOs into camelCase dicts.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


# ---------------------------------------------------------------------------
# Stock journal
# ---------------------------------------------------------------------------


class StockMovementRequest(RequestModel):
    store_id: str = Field(..., alias="storeId", min_length=1)
    product_variant_id: str = Field(..., alias="productVariantId", min_length=1)
    quantity: int
    reference_no: str = Field("", alias="referenceNo")
    reason: str = ""
    notes: str | None = None


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


class ReservationRequest(RequestModel):
    store_id: str = Field(..., alias="storeId", min_length=1)
    variant_id: str = Field(..., alias="variantId", min_length=1)
    quantity: int


# ---------------------------------------------------------------------------
# Cart and orders
# ---------------------------------------------------------------------------


class CartItemRequest(RequestModel):
    store_id: str = Field(..., alias="storeId", min_length=1)
    product_variant_id: str = Field(..., alias="productVariantId", min_length=1)
    quantity: int = 1


class CreateOrderRequest(RequestModel):
    """Checkout of the caller's cart.

    Every field is optional at this level so missing selections are
    reported with the same messages the CLI shows.
    """

    address_id: str | None = Field(None, alias="addressId")
    shipping_courier: str | None = Field(None, alias="shippingCourier")
    shipping_service: str | None = Field(None, alias="shippingService")
    shipping_description: str | None = Field(None, alias="shippingDescription")
    shipping_estimate: str | None = Field(None, alias="shippingEstimate")
    shipping_fee: int | None = Field(None, alias="shippingFee")
    payment_method: str | None = Field(None, alias="paymentMethod")


class DirectOrderRequest(RequestModel):
    product_variant_id: str = Field(..., alias="productVariantId", min_length=1)
    store_id: str = Field(..., alias="storeId", min_length=1)
    address_id: str | None = Field(None, alias="addressId")
    quantity: int = 1


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def camelize(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, dict):
        return {to_camel(key): camelize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [camelize(item) for item in value]
    return value


def ok(data: Any = None, message: str | None = None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "data": camelize(data)}
    if message:
        body["message"] = message
    for key, item in extra.items():
        body[key] = camelize(item)
    return body


def failure(message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "error": message, **extra}
