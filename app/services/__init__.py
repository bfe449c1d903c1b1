"""
                        Services Module

Business logic behind the API. Pure workflow code is kept apart from
persistence so the engine can be tested without a database.

Services:
    - workflow: board configs, validation, transition engine, board view
    - orders: order stores (sql / memory), workflow service, wait estimates
    - catalog: vendors, users, restaurants and templates
    - session: X-User-Id identity
    - excel_manager: process-safe order history workbook
"""

from app.services.excel_manager import ExcelManager

__all__ = ["ExcelManager"]
