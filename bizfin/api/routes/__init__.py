"""
API Routes Package

Contains all route modules for the tracker API.
"""

from .capital import router as capital_router
from .cashflow import router as cashflow_router
from .dashboard import router as dashboard_router
from .employees import router as employees_router
from .expenses import router as expenses_router
from .liabilities import router as liabilities_router
from .pdc import router as pdc_router
from .profile import router as profile_router
from .salaries import router as salaries_router

__all__ = [
    "capital_router",
    "cashflow_router",
    "dashboard_router",
    "employees_router",
    "expenses_router",
    "liabilities_router",
    "pdc_router",
    "profile_router",
    "salaries_router",
]
