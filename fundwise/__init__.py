"""Mini README: Core package initializer for the Fundwise fund tracker.

Fundwise records a community fund's collections and expenses per fiscal
year, derives running balances, rolls closing balances into the next year
and gates the collection ledger behind an admin session or a passkey. The
package root only re-exports the logging helper so that submodules and
scripts share one configuration entry point.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
