# backend/maintrack/services/lifecycle.py
"""
Bakım talebi yaşam döngüsü motoru.

Durum makinesi, operasyon bazlı yetki kontrolü, oluşturma anındaki
ekipman/takım/teknisyen doğrulamaları ve otomatik atama burada yaşar.
Her operasyonda tüm doğrulamalar kalıcı yazmadan önce biter; yan etkiler
(claim, ekipmanın hurdaya çıkması) isimli adımlar olarak açıkça çağrılır.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Tuple

from ..core.clock import to_naive_utc, utcnow
from ..core.errors import (
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from ..domain import policies
from ..domain.constants import (
    KIND_PREVENTIVE,
    ROLE_TECHNICIAN,
    STATUS_IN_PROGRESS,
    STATUS_NEW,
    STATUS_REPAIRED,
    STATUS_SCRAP,
    TECHNICAL_ROLES,
    ALLOWED_KINDS,
)
from ..domain.policies import AccessContext, authorize
from ..domain.ports import (
    EquipmentRegistry,
    IdentityDirectory,
    RequestFilters,
    RequestStore,
    TeamRegistry,
    VisibilityScope,
)
from ..domain.roles import Actor, has_role
from ..domain.state_machine import ensure_transition
from ..models import MaintenanceRequest

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = ("subject", "description", "scheduled_date", "assigned_to_id", "duration_hours")


class RequestLifecycleEngine:
    def __init__(
        self,
        *,
        equipment: EquipmentRegistry,
        teams: TeamRegistry,
        identities: IdentityDirectory,
        requests: RequestStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.equipment = equipment
        self.teams = teams
        self.identities = identities
        self.requests = requests
        self.clock = clock

    # ---- Ortak yardımcılar ----
    def _load(self, request_id: int, *, for_update: bool = False) -> MaintenanceRequest:
        req = self.requests.get(request_id, for_update=for_update)
        if req is None:
            raise NotFoundError("Maintenance request")
        return req

    def _validate_assignee(self, team_id: int, assignee_id: int) -> Any:
        """Atanacak kişi: var olmalı, takım üyesi olmalı, teknik rolde olmalı."""
        user = self.identities.find_by_id(assignee_id)
        if user is None:
            raise NotFoundError("Technician")
        if not self.teams.is_member(team_id, assignee_id):
            raise ValidationError("Assigned technician is not a member of the request team")
        if not has_role(user, TECHNICAL_ROLES):
            raise ValidationError("Assigned user must have technician, manager, or admin role")
        return user

    def _team_ids_for(self, actor: Actor) -> frozenset:
        if actor.role == ROLE_TECHNICIAN:
            return frozenset(self.teams.teams_for_member(actor.identity_id))
        return frozenset()

    def scope_for(self, actor: Actor) -> VisibilityScope:
        return VisibilityScope.for_actor(actor, set(self._team_ids_for(actor)))

    @staticmethod
    def _check_duration(duration_hours: Optional[float]) -> None:
        if duration_hours is not None and duration_hours <= 0:
            raise ValidationError("Duration hours must be a positive number")

    # ---- Oluşturma ----
    def create_request(
        self,
        *,
        subject: str,
        kind: str,
        equipment_id: int,
        creator: Actor,
        description: Optional[str] = None,
        scheduled_date: Optional[datetime] = None,
        team_id: Optional[int] = None,
        assigned_to_id: Optional[int] = None,
    ) -> MaintenanceRequest:
        if not subject or not subject.strip():
            raise ValidationError("Subject is required")
        if kind not in ALLOWED_KINDS:
            raise ValidationError(f"Unknown request type: {kind}")

        # 1) ekipman
        equipment = self.equipment.find_by_id(equipment_id)
        if equipment is None:
            raise NotFoundError("Equipment")
        if equipment.IsScrap:
            raise InvalidOperationError("Cannot create maintenance request for scrapped equipment")

        # 2) takım: açıkça verilen, yoksa ekipmanın varsayılanı
        effective_team_id = team_id if team_id is not None else equipment.DefaultTeamID
        if effective_team_id is None:
            raise ValidationError("Equipment does not have a default maintenance team. Please specify a team.")

        # 3) takım var mı
        team = self.teams.find_by_id(effective_team_id)
        if team is None:
            raise NotFoundError("Maintenance team")

        # 4) önleyici bakım kuralları
        if kind == KIND_PREVENTIVE:
            if scheduled_date is None:
                raise ValidationError("Scheduled date is required for preventive maintenance")
            authorize(
                policies.CREATE_PREVENTIVE,
                AccessContext(actor=creator),
                "Only managers and admins can create preventive maintenance requests",
            )

        # 5) atanan teknisyen
        if assigned_to_id is not None:
            self._validate_assignee(effective_team_id, assigned_to_id)

        # 6) kaydet
        now = self.clock()
        req = MaintenanceRequest(
            Subject=subject.strip(),
            Description_s=description,
            RequestType=kind,
            Status_s=STATUS_NEW,
            EquipmentID=equipment_id,
            TeamID=effective_team_id,
            AssignedToID=assigned_to_id,
            CreatedByID=creator.identity_id,
            ScheduledDate=to_naive_utc(scheduled_date),
            CreatedAt=now,
            UpdatedAt=now,
        )
        req = self.requests.add(req)
        logger.info(
            "request created (RequestID=%s, type=%s, EquipmentID=%s, TeamID=%s, by=%s)",
            req.RequestID, kind, equipment_id, effective_team_id, creator.identity_id,
        )
        return req

    # ---- Alan güncelleme ----
    def update_request_fields(self, request_id: int, patch: Mapping[str, Any], actor: Actor) -> MaintenanceRequest:
        """
        Kısmi güncelleme: patch'te olmayan alanlara dokunulmaz, açık None
        opsiyonel alanı temizler.
        """
        unknown = set(patch) - set(PATCHABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        req = self._load(request_id, for_update=True)
        authorize(
            policies.UPDATE_REQUEST_FIELDS,
            AccessContext(actor=actor, request=req),
            "You do not have permission to update this request",
        )

        if "subject" in patch:
            subject = patch["subject"]
            if subject is None or not str(subject).strip():
                raise ValidationError("Subject cannot be empty")
        if "duration_hours" in patch:
            self._check_duration(patch["duration_hours"])
        if patch.get("assigned_to_id") is not None:
            self._validate_assignee(req.TeamID, patch["assigned_to_id"])

        if "subject" in patch:
            req.Subject = str(patch["subject"]).strip()
        if "description" in patch:
            req.Description_s = patch["description"]
        if "scheduled_date" in patch:
            req.ScheduledDate = to_naive_utc(patch["scheduled_date"])
        if "assigned_to_id" in patch:
            req.AssignedToID = patch["assigned_to_id"]
        if "duration_hours" in patch:
            req.DurationHours = patch["duration_hours"]
        req.UpdatedAt = self.clock()

        req = self.requests.save(req)
        logger.info("request updated (RequestID=%s, fields=%s, by=%s)", request_id, sorted(patch), actor.identity_id)
        return req

    # ---- Durum geçişi ----
    def transition_status(
        self,
        request_id: int,
        target_status: str,
        actor: Actor,
        duration_hours: Optional[float] = None,
    ) -> MaintenanceRequest:
        # 1) yükle (satır kilidi ile)
        req = self._load(request_id, for_update=True)

        # 2) yetki: admin/manager/atanan; InProgress'e çekişte takım teknisyeni claim edebilir
        policy = policies.TRANSITION_STATUS
        if target_status == STATUS_IN_PROGRESS:
            policy = policies.any_of(policy, policies.CLAIM_REQUEST)
        authorize(
            policy,
            AccessContext(actor=actor, request=req, team_ids=self._team_ids_for(actor)),
            "You do not have permission to update this request status",
        )

        # 3) geçiş tablosu
        current = req.Status_s
        ensure_transition(current, target_status)

        # 4) Repaired ön koşulları
        self._check_duration(duration_hours)
        if target_status == STATUS_REPAIRED:
            if duration_hours is None:
                raise ValidationError("Duration hours is required when marking request as repaired")
            if req.AssignedToID is None:
                raise ValidationError("Request must be assigned to a technician before marking as repaired")

        now = self.clock()
        req.Status_s = target_status
        req.UpdatedAt = now

        # 5) tamamlanma damgası
        if target_status in (STATUS_REPAIRED, STATUS_SCRAP):
            req.CompletedAt = now
            if duration_hours is not None:
                req.DurationHours = duration_hours

        # 6) claim: atanmamış talebi ilerleten kişi sahiplenir
        if target_status == STATUS_IN_PROGRESS:
            self._claim_if_unassigned(req, actor)

        # 7) hurda talebi ekipmanı da hurdaya çıkarır
        if target_status == STATUS_SCRAP:
            self._cascade_scrap(req)

        # 8) kaydet
        req = self.requests.save(req)
        logger.info(
            "request status changed (RequestID=%s, %s -> %s, by=%s)",
            request_id, current, target_status, actor.identity_id,
        )
        return req

    def _claim_if_unassigned(self, req: MaintenanceRequest, actor: Actor) -> None:
        if req.AssignedToID is None:
            req.AssignedToID = actor.identity_id
            logger.info("request claimed (RequestID=%s, by=%s)", req.RequestID, actor.identity_id)

    def _cascade_scrap(self, req: MaintenanceRequest) -> None:
        self.equipment.mark_scrap(req.EquipmentID)
        logger.info("equipment marked as scrap (EquipmentID=%s, RequestID=%s)", req.EquipmentID, req.RequestID)

    # ---- Teknisyen atama ----
    def assign_technician(self, request_id: int, technician_id: int, actor: Actor) -> MaintenanceRequest:
        authorize(
            policies.ASSIGN_TECHNICIAN,
            AccessContext(actor=actor),
            "Only managers and admins can assign technicians",
        )
        req = self._load(request_id, for_update=True)
        self._validate_assignee(req.TeamID, technician_id)

        req.AssignedToID = technician_id
        # atama = iş başladı
        if req.Status_s == STATUS_NEW:
            req.Status_s = STATUS_IN_PROGRESS
        req.UpdatedAt = self.clock()

        req = self.requests.save(req)
        logger.info("technician assigned (RequestID=%s, TechnicianID=%s, by=%s)", request_id, technician_id, actor.identity_id)
        return req

    # ---- Okuma ----
    def get_request(self, request_id: int, actor: Actor) -> MaintenanceRequest:
        req = self._load(request_id)
        authorize(
            policies.VIEW_REQUEST,
            AccessContext(actor=actor, request=req, team_ids=self._team_ids_for(actor)),
            "You do not have access to this request",
        )
        return req

    def list_requests(
        self,
        filters: RequestFilters,
        actor: Actor,
        *,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[MaintenanceRequest], int]:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        return self.requests.find(
            filters,
            self.scope_for(actor),
            order_by="-CreatedAt",
            skip=(page - 1) * limit,
            limit=limit,
        )

    def calendar(self, start: datetime, end: datetime, actor: Actor) -> List[MaintenanceRequest]:
        start, end = to_naive_utc(start), to_naive_utc(end)
        if end < start:
            raise ValidationError("endDate must not be before startDate")
        items, _ = self.requests.find(
            RequestFilters(request_type=KIND_PREVENTIVE, scheduled_from=start, scheduled_to=end),
            self.scope_for(actor),
            order_by="ScheduledDate",
        )
        return items

    def overdue(self, actor: Actor) -> List[MaintenanceRequest]:
        items, _ = self.requests.find(
            RequestFilters(scheduled_before=self.clock(), open_only=True),
            self.scope_for(actor),
            order_by="ScheduledDate",
        )
        return items
