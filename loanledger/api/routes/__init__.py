"""API route modules."""

from loanledger.api.routes.health import router as health_router
from loanledger.api.routes.materials import router as materials_router
from loanledger.api.routes.movements import router as movements_router
from loanledger.api.routes.users import auth_router
from loanledger.api.routes.users import router as users_router

__all__ = [
    "health_router",
    "users_router",
    "auth_router",
    "materials_router",
    "movements_router",
]
