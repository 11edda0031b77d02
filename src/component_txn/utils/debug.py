"""Tracing for low-level file mutations.

``debug()`` prints one ``[DEBUG]`` line per primitive mutation (create, copy,
rename, remove) and per backup allocation. It is a plain stdout trace meant
for diagnosing a failed install by hand; structured events go through
structlog and the notification handlers instead.

Environment:
    COMPONENT_TXN_DEBUG: '1', 'true' or 'yes' (case-insensitive) turns the
                         trace on. The value is read once at import.
"""

import os
import sys
from typing import Any

from component_txn.core.constants import DEBUG_ENV

_DEBUG_ENABLED = os.environ.get(DEBUG_ENV, "").lower() in ("1", "true", "yes")


def debug(msg: Any) -> None:
    """Print a trace line when COMPONENT_TXN_DEBUG is on."""
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stdout)
