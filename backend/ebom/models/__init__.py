"""
ORM models. Importing this package registers every table on ebom.core.database.Base.
"""

from ebom.models.lca_target import LcaTarget
from ebom.models.material import Material
from ebom.models.treetable import Treetable, TreetableNode
from ebom.models.usage_event import UsageEvent

__all__ = [
    "LcaTarget",
    "Material",
    "Treetable",
    "TreetableNode",
    "UsageEvent",
]
