"""
Gateway to the constraint-management subsystem.
"""
import logging
from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from core.database import commit_or_abort
from models.constraint import UNRESOLVED_CONSTRAINT_STATUSES, Constraint, ConstraintStatus
from schemas.schedule import OpenConstraintView

log = logging.getLogger(__name__)


class ConstraintService:
    @staticmethod
    def open_constraints_by_activity(
        activity_ids: Iterable[UUID],
        db: Session,
        company_id: Optional[UUID] = None,
    ) -> Dict[UUID, OpenConstraintView]:
        """
        One unresolved constraint per activity id. When an activity has several,
        the most recently created wins (ties broken by id) so the flag is stable
        across reads.
        """
        ids = list(activity_ids)
        if not ids:
            return {}

        query = db.query(Constraint).filter(
            Constraint.activity_id.in_(ids),
            Constraint.status.in_(UNRESOLVED_CONSTRAINT_STATUSES),
        )
        if company_id is not None:
            query = query.filter(Constraint.company_id == company_id)
        rows = query.order_by(Constraint.created_at.desc(), Constraint.id.desc()).all()

        result: Dict[UUID, OpenConstraintView] = {}
        for row in rows:
            if row.activity_id in result:
                continue
            result[row.activity_id] = OpenConstraintView(
                id=row.id,
                activity_id=row.activity_id,
                description=row.description,
            )
        return result

    @staticmethod
    def create_constraint(
        project_id: UUID,
        description: str,
        db: Session,
        activity_id: Optional[UUID] = None,
        category: Optional[str] = None,
        responsible: Optional[str] = None,
        company_id: Optional[UUID] = None,
        source_interference_id: Optional[UUID] = None,
    ) -> Constraint:
        constraint = Constraint(
            company_id=company_id,
            project_id=project_id,
            activity_id=activity_id,
            description=description.strip(),
            category=category,
            responsible=responsible,
            status=ConstraintStatus.OPEN,
            source_interference_id=source_interference_id,
        )
        db.add(constraint)
        commit_or_abort(db, "create constraint")
        db.refresh(constraint)
        log.info("Constraint %s created for project %s", constraint.id, project_id)
        return constraint
