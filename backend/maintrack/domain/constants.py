# backend/maintrack/domain/constants.py

"""
Roller, talep durumları ve talep türleri için uygulama genelindeki tek kaynak.
"""

from typing import Final, FrozenSet

# ---- Roller ----
ROLE_ADMIN: Final[str] = "admin"
ROLE_MANAGER: Final[str] = "manager"
ROLE_TECHNICIAN: Final[str] = "technician"
ROLE_REQUESTER: Final[str] = "requester"

ALLOWED_ROLES: Final = (ROLE_REQUESTER, ROLE_TECHNICIAN, ROLE_MANAGER, ROLE_ADMIN)

SUPERVISOR_ROLES: Final[FrozenSet[str]] = frozenset({ROLE_MANAGER, ROLE_ADMIN})
# Takım üyesi / atanabilir kullanıcı olabilen roller
TECHNICAL_ROLES: Final[FrozenSet[str]] = frozenset({ROLE_TECHNICIAN, ROLE_MANAGER, ROLE_ADMIN})
# Kayıt ekranından seçilebilen roller; yönetici rolleri yalnızca admin verir
SELF_REGISTER_ROLES: Final[FrozenSet[str]] = frozenset({ROLE_REQUESTER, ROLE_TECHNICIAN})

# ---- Talep durumları ----
STATUS_NEW: Final[str] = "New"
STATUS_IN_PROGRESS: Final[str] = "InProgress"
STATUS_REPAIRED: Final[str] = "Repaired"
STATUS_SCRAP: Final[str] = "Scrap"

ALLOWED_STATUSES: Final = (STATUS_NEW, STATUS_IN_PROGRESS, STATUS_REPAIRED, STATUS_SCRAP)
OPEN_STATUSES: Final[FrozenSet[str]] = frozenset({STATUS_NEW, STATUS_IN_PROGRESS})
TERMINAL_STATUSES: Final[FrozenSet[str]] = frozenset({STATUS_REPAIRED, STATUS_SCRAP})

# ---- Talep türleri ----
KIND_CORRECTIVE: Final[str] = "Corrective"
KIND_PREVENTIVE: Final[str] = "Preventive"

ALLOWED_KINDS: Final = (KIND_CORRECTIVE, KIND_PREVENTIVE)
