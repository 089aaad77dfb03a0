from codeshare.core.db.models.account import Account
from codeshare.core.db.models.otp import OTPCode
from codeshare.core.db.models.session import Session
from codeshare.core.db.models.snippet import Snippet
from codeshare.core.db.models.share_link import ShareLink

__all__ = [
    "Account",
    "OTPCode",
    "Session",
    "ShareLink",
    "Snippet",
]
