"""
ceno: Error classification, dispatch and reporting for the CENO client.

Classifies failures met while serving a browsing request, serves a localized
error page for them and reports the ones upstream needs to hear about.
"""

__version__ = "0.1.0"

from ceno.codes import ErrorCode, is_cache_server_error, is_client_error
from ceno.config import CenoConfig
from ceno.dispatch import ErrorDispatcher, Remediation, handle_cc_error, handle_lcs_error
from ceno.state import ErrorState

__all__ = [
    "CenoConfig",
    "ErrorCode",
    "ErrorDispatcher",
    "ErrorState",
    "Remediation",
    "handle_cc_error",
    "handle_lcs_error",
    "is_cache_server_error",
    "is_client_error",
]
