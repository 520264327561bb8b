from .team import MaintenanceTeam, team_member
from .user import AppUser
from .equipment import Equipment
from .maintenance_request import MaintenanceRequest
__all__ = ["MaintenanceTeam", "team_member", "AppUser", "Equipment", "MaintenanceRequest"]
