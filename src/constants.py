"""Application-wide constants.

This module centralizes all magic numbers and protocol strings used by the
webhook admission pipeline so that handlers and tests share a single source
of truth.
"""

# =============================================================================
# Routing
# =============================================================================

# Path the WhatsApp Cloud API delivers callbacks to
WEBHOOK_PATH = "/webhook"

# Payment return pages (served by a separate collaborator, only referenced
# here to build the checkout URLs handed to the conversation engine)
PAYMENT_RETURN_PATH = "/payment_return"
PAYMENT_CANCEL_PATH = "/payment_canceled"
PAYMENT_NOTIFY_PATH = "/payment_notify"

# Prefix for order item names shown on the payment gateway
CHECKOUT_ITEM_NAME_PREFIX = "Order"

# =============================================================================
# Signature Verification
# =============================================================================

# Header carrying the HMAC-SHA256 of the request body
SIGNATURE_HEADER = "X-Hub-Signature-256"

# Algorithm prefix in front of the hex digest
SIGNATURE_PREFIX = "sha256="

# =============================================================================
# Response Bodies
# =============================================================================

# Acknowledgment body sent once the signature checks out
WEBHOOK_ACK_BODY = "Success"

VERIFY_TOKEN_MISMATCH_BODY = "Error, wrong validation token."
SIGNATURE_MISSING_BODY = "error, signature is missing"
SIGNATURE_MISMATCH_BODY = "error signatures do not match"
BODY_READ_ERROR_BODY = "error reading request body."

# =============================================================================
# Message Admission
# =============================================================================

# Messages at least this old (minutes) are dropped instead of answered
STALE_MESSAGE_TIMEOUT_MINUTES = 10

# Timestamp value the platform uses when no timestamp is available
MISSING_TIMESTAMP_SENTINEL = "-1"

# Bounds of a signed 64-bit Unix timestamp
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# =============================================================================
# Application
# =============================================================================

APP_TITLE = "WhatsApp Webhook Admission Service"
APP_VERSION = "0.1.0"
