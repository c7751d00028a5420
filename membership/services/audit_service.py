"""Audit trail of ledger, report and notification events."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from membership.models.audit_log import AuditLog


class AuditService:
    """Write and read audit rows.

    Rows are added to the caller's session and committed together with
    the change they describe; nothing here commits.
    """

    @staticmethod
    def log(
        db: Session,
        entity_type: str,
        entity_id: int,
        action: str,
        actor: str | None = None,
        changes: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Add one audit row to the session.

        Args:
            db: Database session holding the pending change
            entity_type: "payment", "report", ...
            entity_id: Primary key of the entity
            action: "create", "update", "register", "generate_dues", ...
            actor: Identity subject of the caller, None for system runs
            changes: JSON snapshot; updates use {"field": [old, new]}

        Returns:
            The unflushed AuditLog row
        """
        audit = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor=actor,
            changes=changes,
        )
        db.add(audit)
        return audit

    @staticmethod
    def history(db: Session, entity_type: str, entity_id: int) -> list[AuditLog]:
        """Audit rows of one entity, oldest first.

        Rows outlive the entity, so a deleted payment still has a history.
        """
        return list(
            db.scalars(
                select(AuditLog)
                .where(AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id)
                .order_by(AuditLog.id)
            )
        )


__all__ = ["AuditService"]
