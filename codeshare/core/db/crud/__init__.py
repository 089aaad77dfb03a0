from codeshare.core.db.crud.base import BaseDB
from codeshare.core.db.crud.account import AccountDB
from codeshare.core.db.crud.otp import OTPCodeDB
from codeshare.core.db.crud.session import SessionDB
from codeshare.core.db.crud.share_link import ShareLinkDB
from codeshare.core.db.crud.snippet import SnippetDB

# Global CRUD instances - use these instead of creating new instances
account_db = AccountDB()
otp_code_db = OTPCodeDB()
session_db = SessionDB()
snippet_db = SnippetDB()
share_link_db = ShareLinkDB()

__all__ = [
    # Classes (for type hints and subclassing)
    "AccountDB",
    "BaseDB",
    "OTPCodeDB",
    "SessionDB",
    "ShareLinkDB",
    "SnippetDB",
    # Instances
    "account_db",
    "otp_code_db",
    "session_db",
    "share_link_db",
    "snippet_db",
]
