from __future__ import annotations

from ..extensions import db
from warehouse.time_utils import to_utc_z


class Customer(db.Model):
    """
    Customer master data with a running credit balance.

    current_balance_cents is denormalized: it rises by each fulfilled sales
    order total and falls by each recorded payment, inside the same DB
    transaction as the order/payment. credit_limit_cents=NULL means no limit.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_name", "name"),
        db.Index("ix_customers_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    address = db.Column(db.Text, nullable=True)

    customer_group = db.Column(db.String(64), nullable=True)
    customer_category = db.Column(db.String(64), nullable=True)

    credit_limit_cents = db.Column(db.Integer, nullable=True)
    current_balance_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_terms = db.Column(db.String(64), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="active")
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    @property
    def available_credit_cents(self) -> int | None:
        if self.credit_limit_cents is None:
            return None
        return self.credit_limit_cents - self.current_balance_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "customer_group": self.customer_group,
            "customer_category": self.customer_category,
            "credit_limit_cents": self.credit_limit_cents,
            "current_balance_cents": self.current_balance_cents,
            "available_credit_cents": self.available_credit_cents,
            "payment_terms": self.payment_terms,
            "status": self.status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SalesOrder(db.Model):
    """
    Fulfilled sales order.

    Orders are created already fulfilled: stock is decremented and the
    customer balance raised in the same transaction that inserts the order.
    total_cents == subtotal_cents (no tax/shipping layer).
    """
    __tablename__ = "sales_orders"
    __table_args__ = (
        db.UniqueConstraint("so_number", name="uq_sales_orders_so_number"),
        db.Index("ix_sales_orders_customer_order_date", "customer_id", "order_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    so_number = db.Column(db.String(32), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)

    order_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    status = db.Column(db.String(16), nullable=False, default="fulfilled", index=True)

    subtotal_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("sales_orders", lazy=True))
    items = db.relationship(
        "SalesOrderItem",
        back_populates="sales_order",
        cascade="all, delete-orphan",
        order_by="SalesOrderItem.id",
        lazy=True,
    )

    def to_dict(self, *, expand: bool = False) -> dict:
        data = {
            "id": self.id,
            "so_number": self.so_number,
            "customer_id": self.customer_id,
            "order_date": to_utc_z(self.order_date),
            "status": self.status,
            "subtotal_cents": self.subtotal_cents,
            "total_cents": self.total_cents,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "items": [item.to_dict(expand=expand) for item in self.items],
        }
        if expand:
            data["customer"] = self.customer.to_dict() if self.customer else None
        return data


class SalesOrderItem(db.Model):
    __tablename__ = "sales_order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_order_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sales_order_id = db.Column(db.Integer, db.ForeignKey("sales_orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    sales_order = db.relationship("SalesOrder", back_populates="items")
    product = db.relationship("Product", backref=db.backref("sales_order_items", lazy=True))

    def to_dict(self, *, expand: bool = False) -> dict:
        data = {
            "id": self.id,
            "sales_order_id": self.sales_order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }
        if expand:
            data["product"] = self.product.to_dict() if self.product else None
        return data


class Payment(db.Model):
    """Customer payment. Recording one lowers the customer's current balance."""
    __tablename__ = "payments"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_payments_amount_positive"),
        db.Index("ix_payments_customer_date", "customer_id", "payment_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)

    amount_cents = db.Column(db.Integer, nullable=False)
    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    method = db.Column(db.String(32), nullable=False)
    reference = db.Column(db.String(128), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "amount_cents": self.amount_cents,
            "payment_date": to_utc_z(self.payment_date),
            "method": self.method,
            "reference": self.reference,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
