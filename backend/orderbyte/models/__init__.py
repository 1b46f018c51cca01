from .tenancy import Organization
from .menu import Menu, MenuCategory, MenuItem
from .orders import Order, OrderLine
from .staff import StaffUser, PlatformAdmin
from .auth import SessionToken
from .audit import AuditLogEntry

__all__ = [
    'Organization',
    'Menu', 'MenuCategory', 'MenuItem',
    'Order', 'OrderLine',
    'StaffUser', 'PlatformAdmin',
    'SessionToken',
    'AuditLogEntry',
]
