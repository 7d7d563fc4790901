from __future__ import annotations

from ..extensions import db
from warehouse.time_utils import to_utc_z


class Inventory(db.Model):
    """
    On-hand stock for one product (1:1 with Product).

    Created lazily on the first purchase order receipt for the product, at
    which point reorder_level / reorder_quantity are fixed from the product
    category's reorder class.

    quantity_on_hand never goes negative: decrements are conditional updates
    and the check constraint backs that up at the database level.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.UniqueConstraint("product_id", name="uq_inventory_product"),
        db.CheckConstraint("quantity_on_hand >= 0", name="ck_inventory_quantity_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)

    quantity_on_hand = db.Column(db.Integer, nullable=False, default=0)
    reorder_level = db.Column(db.Integer, nullable=False, default=50)
    reorder_quantity = db.Column(db.Integer, nullable=False, default=100)
    last_restocked = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    product = db.relationship(
        "Product",
        backref=db.backref("inventory", uselist=False, lazy=True, cascade="all, delete-orphan"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_on_hand <= self.reorder_level

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "quantity_on_hand": self.quantity_on_hand,
            "reorder_level": self.reorder_level,
            "reorder_quantity": self.reorder_quantity,
            "last_restocked": to_utc_z(self.last_restocked) if self.last_restocked else None,
            "is_low_stock": self.is_low_stock,
            "updated_at": to_utc_z(self.updated_at),
        }


class Vendor(db.Model):
    """Supplier directory entry. Owns zero-or-more purchase orders."""
    __tablename__ = "vendors"
    __table_args__ = (
        db.Index("ix_vendors_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    contact_name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    address = db.Column(db.Text, nullable=True)
    terms = db.Column(db.String(64), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact_name": self.contact_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "terms": self.terms,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class PurchaseOrder(db.Model):
    """
    Purchase order from a vendor.

    LIFECYCLE:
    1. pending: created, items may be edited
    2. received: inventory credited; the order and its items are frozen
    3. cancelled: closed without receiving
    """
    __tablename__ = "purchase_orders"
    __table_args__ = (
        db.UniqueConstraint("po_number", name="uq_purchase_orders_po_number"),
        db.Index("ix_purchase_orders_status_order_date", "status", "order_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    po_number = db.Column(db.String(32), nullable=False)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)

    order_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expected_date = db.Column(db.DateTime(timezone=True), nullable=True)
    received_date = db.Column(db.DateTime(timezone=True), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    vendor = db.relationship("Vendor", backref=db.backref("purchase_orders", lazy=True))
    items = db.relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
        lazy=True,
    )

    @property
    def total_cost_cents(self) -> int:
        return sum(item.line_cost_cents for item in self.items)

    def to_dict(self, *, expand: bool = False) -> dict:
        data = {
            "id": self.id,
            "po_number": self.po_number,
            "vendor_id": self.vendor_id,
            "order_date": to_utc_z(self.order_date),
            "expected_date": to_utc_z(self.expected_date) if self.expected_date else None,
            "received_date": to_utc_z(self.received_date) if self.received_date else None,
            "status": self.status,
            "notes": self.notes,
            "total_cost_cents": self.total_cost_cents,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if expand:
            data["vendor"] = self.vendor.to_dict() if self.vendor else None
            data["items"] = [item.to_dict(expand=True) for item in self.items]
        return data


class PurchaseOrderItem(db.Model):
    __tablename__ = "purchase_order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_purchase_order_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    purchase_order_id = db.Column(db.Integer, db.ForeignKey("purchase_orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_cost_cents = db.Column(db.Integer, nullable=False)

    purchase_order = db.relationship("PurchaseOrder", back_populates="items")
    product = db.relationship("Product", backref=db.backref("purchase_order_items", lazy=True))

    @property
    def line_cost_cents(self) -> int:
        return self.quantity * self.unit_cost_cents

    def to_dict(self, *, expand: bool = False) -> dict:
        data = {
            "id": self.id,
            "purchase_order_id": self.purchase_order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_cost_cents": self.unit_cost_cents,
            "line_cost_cents": self.line_cost_cents,
        }
        if expand:
            data["product"] = self.product.to_dict() if self.product else None
        return data


class DocumentSequence(db.Model):
    """
    Per-document-type counter used to allocate SO-/PO- numbers.

    The row is locked for update while a number is allocated, and the
    allocated number is never lower than max(existing) + 1.
    """
    __tablename__ = "document_sequences"

    document_type = db.Column(db.String(32), primary_key=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
