# Tum modelleri buradan import ediyoruz
# Boylece Alembic autogenerate tum tablolari gorebilir
from invoicely.models.user import User
from invoicely.models.customer import Customer
from invoicely.models.product import Product
from invoicely.models.stock_movement import StockMovement
from invoicely.models.business import BusinessSettings
from invoicely.models.saved_invoice import SavedInvoice
from invoicely.models.activity import Activity

__all__ = [
    "User", "Customer", "Product", "StockMovement",
    "BusinessSettings", "SavedInvoice", "Activity",
]
