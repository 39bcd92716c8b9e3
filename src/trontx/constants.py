"""
Ledger constants for the trontx SDK.

Limits and defaults enforced by the contract message factory, the
transaction assembler and the mutator. Values are in sun (1 TRX = 1_000_000
sun) unless noted otherwise; times are in milliseconds.
"""

# ============================================================================
# Addresses
# ============================================================================

ADDRESS_PREFIX = 0x41
ADDRESS_PREFIX_HEX = "41"
ADDRESS_SIZE = 21
ADDRESS_HEX_LENGTH = 42
ADDRESS_BASE58_LENGTH = 34

# ============================================================================
# Amounts and limits
# ============================================================================

SUN_PER_TRX = 1_000_000
MAX_INT32 = 2**31 - 1
MAX_INT64 = 2**63 - 1
MAX_UINT256 = 2**256 - 1

DEFAULT_FEE_LIMIT = 150_000_000
MAX_FEE_LIMIT = 15_000_000_000

DEFAULT_ORIGIN_ENERGY_LIMIT = 10_000_000
MAX_ORIGIN_ENERGY_LIMIT = 10_000_000

DEFAULT_USER_FEE_PERCENTAGE = 100
MAX_PERCENTAGE = 100

MIN_FREEZE_DURATION_DAYS = 3
MAX_TOKEN_PRECISION = 6

ACCOUNT_ID_MIN_BYTES = 8
ACCOUNT_ID_MAX_BYTES = 32

MAX_URL_BYTES = 256

# Second token id used for TRX in a token/TRX exchange pair.
TRX_EXCHANGE_TOKEN_ID = "_"

# ============================================================================
# Transaction envelope
# ============================================================================

EXPIRATION_WINDOW_MS = 60_000

# Charged by the ledger when a transaction carries a data field. Not deducted here.
DATA_FIELD_FEE_SUN = 1_000_000

# ============================================================================
# ABI
# ============================================================================

SELECTOR_SIZE = 4
WORD_SIZE = 32
TRC_TOKEN_TYPE = "trcToken"

__all__ = [
    "ADDRESS_PREFIX",
    "ADDRESS_PREFIX_HEX",
    "ADDRESS_SIZE",
    "ADDRESS_HEX_LENGTH",
    "ADDRESS_BASE58_LENGTH",
    "SUN_PER_TRX",
    "MAX_INT32",
    "MAX_INT64",
    "MAX_UINT256",
    "DEFAULT_FEE_LIMIT",
    "MAX_FEE_LIMIT",
    "DEFAULT_ORIGIN_ENERGY_LIMIT",
    "MAX_ORIGIN_ENERGY_LIMIT",
    "DEFAULT_USER_FEE_PERCENTAGE",
    "MAX_PERCENTAGE",
    "MIN_FREEZE_DURATION_DAYS",
    "MAX_TOKEN_PRECISION",
    "ACCOUNT_ID_MIN_BYTES",
    "ACCOUNT_ID_MAX_BYTES",
    "MAX_URL_BYTES",
    "TRX_EXCHANGE_TOKEN_ID",
    "EXPIRATION_WINDOW_MS",
    "DATA_FIELD_FEE_SUN",
    "SELECTOR_SIZE",
    "WORD_SIZE",
    "TRC_TOKEN_TYPE",
]
