from grocery.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, ProductTypeResponse,
)
from grocery.schemas.inventory import (
    StockAdjustmentRequest, BulkStockAdjustmentRequest, BulkStockAdjustmentResponse, InventoryStats,
)
from grocery.schemas.sale import (
    SaleItemCreate, BulkSaleCreate, SaleRecord, BulkSaleResponse, TodayStats,
)

__all__ = [
    "ProductCreate", "ProductUpdate", "ProductResponse", "ProductTypeResponse",
    "StockAdjustmentRequest", "BulkStockAdjustmentRequest", "BulkStockAdjustmentResponse", "InventoryStats",
    "SaleItemCreate", "BulkSaleCreate", "SaleRecord", "BulkSaleResponse", "TodayStats",
]
