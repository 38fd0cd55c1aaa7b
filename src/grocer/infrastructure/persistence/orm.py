"""SQLAlchemy table mappings.

Rows here are persistence shapes only; repositories translate them to
and from the domain dataclasses. Amounts are stored as integers in the
smallest currency unit, enums as their string values.
"""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Catalog collaborators
# ---------------------------------------------------------------------------


class StoreRow(Base):
    __tablename__ = "stores"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    city: Mapped[str] = mapped_column(sa.String(120), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)


class ProductVariantRow(Base):
    __tablename__ = "product_variants"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    product_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    sku: Mapped[str] = mapped_column(sa.String(64), nullable=False, unique=True)
    price: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)


class AddressRow(Base):
    __tablename__ = "addresses"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(sa.String(64), nullable=False, index=True)
    label: Mapped[str] = mapped_column(sa.String(120), nullable=False, default="")
    city: Mapped[str] = mapped_column(sa.String(120), nullable=False, default="")


class CartRow(Base):
    __tablename__ = "carts"

    id: Mapped[str] = mapped_column(sa.String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(sa.String(64), nullable=False, unique=True)
    store_id: Mapped[str | None] = mapped_column(
        sa.String(64), sa.ForeignKey("stores.id"), nullable=True
    )

    items: Mapped[list[CartItemRow]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemRow.id",
        lazy="selectin",
    )


class CartItemRow(Base):
    __tablename__ = "cart_items"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    cart_id: Mapped[str] = mapped_column(
        sa.String(32), sa.ForeignKey("carts.id", ondelete="CASCADE"), nullable=False
    )
    variant_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("product_variants.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    price_at_add: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)

    cart: Mapped[CartRow] = relationship(back_populates="items")

    __table_args__ = (
        sa.UniqueConstraint("cart_id", "variant_id", name="uq_cart_items_cart_variant"),
        sa.CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
    )


# ---------------------------------------------------------------------------
# Inventory and stock journal
# ---------------------------------------------------------------------------


class InventoryRow(Base):
    __tablename__ = "inventories"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("stores.id"), nullable=False
    )
    variant_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("product_variants.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    reserved: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    updated_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        sa.UniqueConstraint("store_id", "variant_id", name="uq_inventories_store_variant"),
        sa.CheckConstraint("quantity >= 0", name="ck_inventories_quantity_non_negative"),
        sa.CheckConstraint("reserved >= 0", name="ck_inventories_reserved_non_negative"),
        sa.CheckConstraint("reserved <= quantity", name="ck_inventories_reserved_within_quantity"),
    )


class StockJournalRow(Base):
    __tablename__ = "stock_journals"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("stores.id"), nullable=False
    )
    variant_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("product_variants.id"), nullable=False
    )
    type: Mapped[str] = mapped_column(sa.String(3), nullable=False)
    quantity: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    stock_before: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    stock_after: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    reference_no: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    created_by: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    order_id: Mapped[str | None] = mapped_column(
        sa.String(32), sa.ForeignKey("orders.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)

    __table_args__ = (
        sa.CheckConstraint("quantity > 0", name="ck_stock_journals_quantity_positive"),
        sa.CheckConstraint("type IN ('IN', 'OUT')", name="ck_stock_journals_type"),
        sa.Index("ix_stock_journals_variant_time", "store_id", "variant_id", "created_at"),
        sa.Index("ix_stock_journals_store_time", "store_id", "created_at"),
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderRow(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(sa.String(32), primary_key=True)
    order_number: Mapped[str] = mapped_column(sa.String(40), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(sa.String(64), nullable=False, index=True)
    address_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("addresses.id"), nullable=False
    )
    store_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("stores.id"), nullable=False
    )

    shipping_courier: Mapped[str] = mapped_column(sa.String(40), nullable=False)
    shipping_service: Mapped[str] = mapped_column(sa.String(40), nullable=False)
    shipping_description: Mapped[str] = mapped_column(sa.String(200), nullable=False, default="")
    shipping_estimate: Mapped[str] = mapped_column(sa.String(40), nullable=False, default="")
    shipping_fee: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)

    subtotal: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    tax: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, default=0)
    total_discount: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, default=0)
    total: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)

    payment_method: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    payment_status: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    order_status: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    auto_cancel_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)

    items: Mapped[list[OrderItemRow]] = relationship(
        cascade="all, delete-orphan", order_by="OrderItemRow.id", lazy="selectin"
    )
    history: Mapped[list[OrderHistoryRow]] = relationship(
        cascade="all, delete-orphan", order_by="OrderHistoryRow.id", lazy="selectin"
    )
    payment: Mapped[PaymentRow | None] = relationship(
        cascade="all, delete-orphan", uselist=False, lazy="selectin"
    )

    __table_args__ = (
        sa.Index("ix_orders_expiry", "order_status", "payment_status", "auto_cancel_at"),
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        sa.String(32), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    variant_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("product_variants.id"), nullable=False
    )
    sku: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    product_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    variant_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    price: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    quantity: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    subtotal: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    discount: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, default=0)
    total: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)


class OrderHistoryRow(Base):
    __tablename__ = "order_histories"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        sa.String(32), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_status: Mapped[str | None] = mapped_column(sa.String(20), nullable=True)
    to_status: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    note: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    created_by: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)


class PaymentRow(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        sa.String(32), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    method: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    amount: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
