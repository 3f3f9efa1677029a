"""Application-wide constants and configuration values.

Centralizes magic numbers and slot names shared by the cart store,
the checkout flow and the product wizard.
"""

# ============== TIME CONSTANTS (seconds) ==============
SECONDS_PER_DAY = 86400

# ============== CART ==============
PURCHASE_CART_SLOT = "reading_cart"
BORROW_CART_SLOT = "reading_library_cart"
BORROW_LINE_PREFIX = "library"
UNKNOWN_LIBRARY = "unknown"

# Rent is charged as a fraction of the catalog price for one rental period
RENTAL_PRICE_FRACTION = 0.4
RENTAL_PERIOD_DAYS = 15

# ============== CHECKOUT ==============
READING_ORDER_MODULE = "vyronaread"
BORROW_REQUEST_MODULE = "VyronaRead"
DEFAULT_BORROW_REASON = "Bulk borrow request from VyronaRead"

ORDERS_ENDPOINT = "/api/orders"
BOOK_LOANS_ENDPOINT = "/api/book-loans"
PRODUCTS_ENDPOINT = "/api/products"

DEFAULT_API_BASE_URL = "http://localhost:5000"
DEFAULT_CHECKOUT_TIMEOUT_SECONDS = 15

# ============== PRODUCT WIZARD ==============
TAB_BASIC = "basic"
TAB_DETAILS = "details"
TAB_IMAGES = "images"
TAB_INVENTORY = "inventory"

WIZARD_TABS = (TAB_BASIC, TAB_DETAILS, TAB_IMAGES, TAB_INVENTORY)
WIZARD_TAB_LABELS = {
    TAB_BASIC: "Basic Info",
    TAB_DETAILS: "Product Details",
    TAB_IMAGES: "Images & Media",
    TAB_INVENTORY: "Inventory & Specs",
}

GROUP_BUY_MODULE = "vyronasocial"
STANDARD_PRODUCT_MODULE = "vyronahub"
DEFAULT_GROUP_BUY_MIN_QUANTITY = 2
DEFAULT_GROUP_BUY_DISCOUNT = 10
