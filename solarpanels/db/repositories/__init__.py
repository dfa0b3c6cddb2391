# Repository pattern: data access behind narrow async interfaces

from solarpanels.db.repositories.panel_repository import PanelRepository
from solarpanels.db.repositories.request_panel_repository import RequestPanelRepository
from solarpanels.db.repositories.request_repository import RequestFilter, SolarPanelRequestRepository
from solarpanels.db.repositories.user_repository import UserRepository

__all__ = [
    "UserRepository",
    "PanelRepository",
    "SolarPanelRequestRepository",
    "RequestPanelRepository",
    "RequestFilter",
]
