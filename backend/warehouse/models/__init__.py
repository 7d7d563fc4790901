from .catalog import Category, Subcategory, Brand, Product, ProductChangeLog
from .inventory import Inventory, Vendor, PurchaseOrder, PurchaseOrderItem, DocumentSequence
from .sales import Customer, SalesOrder, SalesOrderItem, Payment

__all__ = [
    'Category', 'Subcategory', 'Brand', 'Product', 'ProductChangeLog',
    'Inventory', 'Vendor', 'PurchaseOrder', 'PurchaseOrderItem', 'DocumentSequence',
    'Customer', 'SalesOrder', 'SalesOrderItem', 'Payment',
]
