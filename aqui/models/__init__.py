from aqui.models.live_session import VendorLiveSession
from aqui.models.platform_settings import PlatformSettings
from aqui.models.user import User, UserRole
from aqui.models.vendor import Vendor, VendorStatus

__all__ = [
    "VendorLiveSession",
    "PlatformSettings",
    "User",
    "UserRole",
    "Vendor",
    "VendorStatus",
]
