from __future__ import annotations

from ..extensions import db
from warehouse.time_utils import to_utc_z


class Category(db.Model):
    """
    Product category.

    reorder_class is a stable code (BEVERAGE, SNACK, DAIRY, PRODUCE, MEAT,
    FROZEN, STANDARD) used to pick reorder thresholds the first time one of
    the category's products is stocked. Renaming a category never changes it.
    """
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_categories_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    reorder_class = db.Column(db.String(16), nullable=False, default="STANDARD")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "reorder_class": self.reorder_class,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Subcategory(db.Model):
    __tablename__ = "subcategories"
    __table_args__ = (
        db.UniqueConstraint("category_id", "name", name="uq_subcategories_category_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    category = db.relationship("Category", backref=db.backref("subcategories", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }


class Brand(db.Model):
    __tablename__ = "brands"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_brands_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    """
    Product master data.

    PRICING (all cents):
    - cost_cents: most recent purchase cost
    - retail_price_cents: list price
    - floor_price_cents: minimum sellable unit price. Conventionally
      cost * 1.15, stored explicitly and only recomputed on request
      (or on cost change when AUTO_RECOMPUTE_FLOOR_PRICE is enabled).

    floor <= retail is expected but not enforced on write.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_products_sku"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    sku = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    cost_cents = db.Column(db.Integer, nullable=False, default=0)
    retail_price_cents = db.Column(db.Integer, nullable=False, default=0)
    floor_price_cents = db.Column(db.Integer, nullable=True)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    subcategory_id = db.Column(db.Integer, db.ForeignKey("subcategories.id"), nullable=True, index=True)
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id"), nullable=True, index=True)

    # Unit-of-measure metadata
    unit_of_measurement = db.Column(db.String(32), nullable=True)
    package_size = db.Column(db.Float, nullable=True)
    case_pack_count = db.Column(db.Integer, nullable=True)
    storage_type = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    subcategory = db.relationship("Subcategory", backref=db.backref("products", lazy=True))
    brand = db.relationship("Brand", backref=db.backref("products", lazy=True))
    change_logs = db.relationship(
        "ProductChangeLog",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductChangeLog.id",
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r}>"

    def to_dict(self, *, expand: bool = False) -> dict:
        data = {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "cost_cents": self.cost_cents,
            "retail_price_cents": self.retail_price_cents,
            "floor_price_cents": self.floor_price_cents,
            "category_id": self.category_id,
            "subcategory_id": self.subcategory_id,
            "brand_id": self.brand_id,
            "unit_of_measurement": self.unit_of_measurement,
            "package_size": self.package_size,
            "case_pack_count": self.case_pack_count,
            "storage_type": self.storage_type,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if expand:
            data["category"] = self.category.to_dict() if self.category else None
            data["subcategory"] = self.subcategory.to_dict() if self.subcategory else None
            data["brand"] = self.brand.to_dict() if self.brand else None
            data["inventory"] = self.inventory.to_dict() if self.inventory else None
        return data


class ProductChangeLog(db.Model):
    """
    Append-only audit trail of product pricing and description changes.

    CHANGE TYPES: created, price_increase, price_decrease, cost_change,
    description_update, updated.

    IMMUTABLE: Rows are never updated. They only disappear when the product
    itself is deleted.
    """
    __tablename__ = "product_change_logs"
    __table_args__ = (
        db.Index("ix_product_change_logs_product_changed", "product_id", "changed_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    change_type = db.Column(db.String(32), nullable=False, index=True)

    old_cost_cents = db.Column(db.Integer, nullable=True)
    new_cost_cents = db.Column(db.Integer, nullable=True)
    old_retail_cents = db.Column(db.Integer, nullable=True)
    new_retail_cents = db.Column(db.Integer, nullable=True)
    old_margin = db.Column(db.Float, nullable=True)
    new_margin = db.Column(db.Float, nullable=True)
    old_description = db.Column(db.Text, nullable=True)
    new_description = db.Column(db.Text, nullable=True)

    changed_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    product = db.relationship("Product", back_populates="change_logs")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "change_type": self.change_type,
            "old_cost_cents": self.old_cost_cents,
            "new_cost_cents": self.new_cost_cents,
            "old_retail_cents": self.old_retail_cents,
            "new_retail_cents": self.new_retail_cents,
            "old_margin": self.old_margin,
            "new_margin": self.new_margin,
            "old_description": self.old_description,
            "new_description": self.new_description,
            "changed_at": to_utc_z(self.changed_at),
        }
