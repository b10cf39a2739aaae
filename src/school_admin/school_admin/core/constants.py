"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_PAYMENT_DUE_DAYS = 7
DEFAULT_REGISTRATION_LOCK_TIMEOUT_SECONDS = 15
DEFAULT_SCHOOL_NAME = "Yeka Michael Schools"

# Late payment penalty: flat first week, then a fixed amount per started week.
PENALTY_FIRST_WEEK = Decimal("50")
PENALTY_PER_EXTRA_WEEK = Decimal("25")

INVOICE_PREFIX = "INV"
PAYMENT_PREFIX = "PAY"
REGISTRATION_PREFIX = "REG"
SEQUENCE_WIDTH = 4
REGISTRATION_SEQUENCE_WIDTH = 5

FEE_TYPE_REGISTRATION = "REGISTRATION"
FEE_TYPE_TUITION = "TUITION"
