"""
ceno.tables: Static policy tables keyed by error code.

Built once at import and exposed read-only, so any number of request threads
may consult them without locking.
"""

from types import MappingProxyType
from typing import Mapping

from ceno.codes import ErrorCode

# Error codes to the ids of localizable explanations of what the user can do.
# An empty id means there is no canned advice for the error.
ERROR_ADVICE: Mapping[int, str] = MappingProxyType({
    ErrorCode.ERR_NO_CONFIG: "missing_config_err",
    ErrorCode.ERR_MALFORMED_URL: "malformed_url_err",
    ErrorCode.ERR_NO_FEEDS_FILE: "no_feeds_file_err",
    ErrorCode.ERR_NO_ARTICLES_FILE: "no_articles_advice",
    ErrorCode.ERR_CORRUPT_JSON: "corrupt_json_err",
    ErrorCode.ERR_MALFORMED_STATUS_CHECK: "contact_devs_err",
    ErrorCode.ERR_NO_CONNECT_LCS: "agent_communication_err",
    ErrorCode.ERR_MALFORMED_LCS_RESPONSE: "contact_devs_err",
    ErrorCode.ERR_FROM_LCS: "",
    ErrorCode.ERR_NO_CONNECT_RS: "agent_communication_err",
    ErrorCode.ERR_MISSING_VIEW: "download_package_err",
    ErrorCode.ERR_INVALID_ERROR: "contact_devs_err",
    ErrorCode.ERR_LCS_NOT_READY: "lcs_not_ready_err",
    ErrorCode.ERR_LCS_MALFORMED_URL: "malformed_url_err",
    ErrorCode.ERR_LCS_URL_DECODE: "malformed_url_err",
    ErrorCode.ERR_LCS_WILL_NOT_SERVE: "malformed_url_err",
    ErrorCode.ERR_LCS_LOOKUP_FAILURE: "lcs_lookup_failure_err",
    ErrorCode.ERR_LCS_INTERNAL: "lcs_lookup_failure_err",
    ErrorCode.ERR_LCS_WAIT_FREENET: "lcs_lookup_failure_err",
    ErrorCode.ERR_LCS_WAIT_PEERS: "lcs_lookup_failure_err",
})

# Errors expected to resolve themselves over time get a page that reloads
# itself, the same way the wait page does.
AUTO_REFRESHING_ERROR_PAGES: Mapping[int, bool] = MappingProxyType({
    ErrorCode.ERR_NO_FEEDS_FILE: True,
    ErrorCode.ERR_NO_ARTICLES_FILE: True,
    ErrorCode.ERR_NO_CONNECT_LCS: True,
    ErrorCode.ERR_MALFORMED_LCS_RESPONSE: True,
    ErrorCode.ERR_FROM_LCS: True,
    ErrorCode.ERR_NO_CONNECT_RS: True,
    ErrorCode.ERR_LCS_LOOKUP_FAILURE: True,
    ErrorCode.ERR_LCS_INTERNAL: True,
    ErrorCode.ERR_LCS_WAIT_FREENET: True,
    ErrorCode.ERR_LCS_WAIT_PEERS: True,
})

# The renderer redirects unknown codes here, so it must always resolve.
if ErrorCode.ERR_INVALID_ERROR not in ERROR_ADVICE:
    raise RuntimeError("ERR_INVALID_ERROR must have an advice entry")


def advice_for(code: int, table: Mapping[int, str] = ERROR_ADVICE) -> str | None:
    """Return the advice key for a code, or None if the code is unknown."""
    return table.get(code)


def should_refresh(code: int, table: Mapping[int, bool] = AUTO_REFRESHING_ERROR_PAGES) -> bool:
    return table.get(code, False)
