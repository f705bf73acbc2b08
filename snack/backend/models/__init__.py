# Import all models so Base.metadata is complete for create_all and Alembic
from snack.backend.models.analytics import LinkClick, ListView
from snack.backend.models.base import Base
from snack.backend.models.extension import ExtensionAuthCode, ExtensionToken
from snack.backend.models.link import Link
from snack.backend.models.list import List
from snack.backend.models.purchase import ListPurchase
from snack.backend.models.saved_list import SavedList
from snack.backend.models.user import User

__all__ = [
    "Base",
    "ExtensionAuthCode",
    "ExtensionToken",
    "Link",
    "LinkClick",
    "List",
    "ListPurchase",
    "ListView",
    "SavedList",
    "User",
]
