"""
Service layer tying configuration, session and components together
"""

from .inventory_service import InventoryService

__all__ = ['InventoryService']
