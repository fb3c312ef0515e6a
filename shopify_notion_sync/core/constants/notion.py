"""
Notion constants — API limits and database property names.
Version: 1.0.0
"""

NOTION_API_BASE_URL: str = "https://api.notion.com/v1"

# Notion text/select limits
MAX_RICH_TEXT_LENGTH: int = 2000
MAX_SELECT_LENGTH: int = 100
MAX_MULTI_SELECT_OPTIONS: int = 100

# Products database
PRODUCT_NAME: str = "Product Name"
PRODUCT_ID: str = "Shopify Product ID"
DESCRIPTION: str = "Description"
VENDOR: str = "Vendor"
PRODUCT_TYPE: str = "Product Type"
TAGS: str = "Tags"
IMAGE_URL: str = "Image URL"
PRODUCT_HANDLE: str = "Product Handle"
DEFAULT_VARIANT_SKU: str = "Default Variant SKU"
DEFAULT_VARIANT_PRICE: str = "Default Variant Price"
COMPARE_AT_PRICE: str = "Compare At Price"
INVENTORY_ITEM_ID: str = "Inventory Item ID"
CURRENT_STOCK: str = "Current Stock"
TOTAL_VARIANTS: str = "Total Variants"
COLLECTIONS: str = "Collections"
PRODUCT_URL: str = "Product URL"
STATUS: str = "Status"
LAST_SYNCED_AT: str = "Last Synced At"

# Orders database
ORDER_ID: str = "Order ID"
ORDER_NUMBER: str = "Order Number"
CREATED_AT: str = "Created At"
CANCELLED_AT: str = "Cancelled At"
CUSTOMER_EMAIL: str = "Customer Email"
TOTAL_PRICE: str = "Total Price"
CURRENT_TOTAL_PRICE: str = "Current Total Price"
HAS_REFUNDS: str = "Has Refunds"
PRODUCTS_PURCHASED: str = "Products Purchased"
TOTAL_ITEMS: str = "Total Items"

DEFAULT_PRODUCT_TITLE: str = "Untitled Product"
