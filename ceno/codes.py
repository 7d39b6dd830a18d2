"""
ceno.codes: The numeric error code space.

Codes are namespaced by their thousands digit: ``1xxx`` codes are raised inside
the client component (CC), ``2xxx`` codes are reported to it by the local cache
server (LCS). The numbers are part of the wire contract with the frontend and
must never change.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    # CC errors
    ERR_NO_CONFIG = 1100
    ERR_MALFORMED_URL = 1101
    ERR_MISSING_VIEW = 1102
    ERR_NO_FEEDS_FILE = 1103
    ERR_NO_ARTICLES_FILE = 1104
    ERR_CORRUPT_JSON = 1105
    ERR_MALFORMED_STATUS_CHECK = 1106
    ERR_NO_CONNECT_LCS = 1200
    ERR_MALFORMED_LCS_RESPONSE = 1201
    ERR_FROM_LCS = 1202
    ERR_NO_CONNECT_RS = 1203
    ERR_LCS_NOT_READY = 1204
    ERR_INVALID_ERROR = 100

    # LCS errors that can be reported to the CC
    ERR_LCS_MALFORMED_URL = 2110
    ERR_LCS_URL_DECODE = 2112
    ERR_LCS_WILL_NOT_SERVE = 2120
    ERR_LCS_LOOKUP_FAILURE = 2130
    ERR_LCS_INTERNAL = 2140
    ERR_LCS_WAIT_FREENET = 2300
    ERR_LCS_WAIT_PEERS = 2301


CC_ORIGIN = 1
LCS_ORIGIN = 2


def is_client_error(code: int) -> bool:
    """Return True if the code belongs to the CC (it has the form 1XXX)."""
    return int(code) // 1000 == CC_ORIGIN


def is_cache_server_error(code: int) -> bool:
    """Return True if the code was sent from the LCS (it has the form 2XXX)."""
    return int(code) // 1000 == LCS_ORIGIN


def describe(code: int) -> str:
    """Name a code for logs and listings, known or not."""
    try:
        return ErrorCode(code).name
    except ValueError:
        return f"UNKNOWN_{int(code)}"


def origin(code: int) -> str:
    if is_client_error(code):
        return "cc"
    if is_cache_server_error(code):
        return "lcs"
    return "other"
