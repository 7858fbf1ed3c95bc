"""View state of the proxy list screens: columns, filters, sorting, paging."""

from .controller import ProxyListController
from .screens import ScreenIdentity, global_list, open_source_screen, source_list

__version__ = "0.1.0"

__all__ = [
    "ProxyListController",
    "ScreenIdentity",
    "__version__",
    "global_list",
    "open_source_screen",
    "source_list",
]
