"""View state derived from the entity store (explorer tree, open tabs)"""

from codeshell.views.explorer_state import ExplorerState, TreeRow
from codeshell.views.open_tabs import OpenTabs, Tab

__all__ = ["ExplorerState", "OpenTabs", "Tab", "TreeRow"]
