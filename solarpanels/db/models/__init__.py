from solarpanels.db.models.request_panel import RequestPanel
from solarpanels.db.models.solar_panel import SolarPanel
from solarpanels.db.models.solar_panel_request import RequestStatus, SolarPanelRequest
from solarpanels.db.models.user import User

__all__ = ["User", "SolarPanel", "SolarPanelRequest", "RequestStatus", "RequestPanel"]
