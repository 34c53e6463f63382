"""
Quantity takeoff links and daily target apportionment.
"""
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from core.numbers import round2
from models.quantity import QuantityLink
from schemas.schedule import LinkedQuantityTarget, QuantityLinkView


def apportion(total_qty: float, duration_days: int) -> float:
    """Even daily share of `total_qty` over the activity duration."""
    if duration_days <= 0:
        return round2(total_qty)
    return round2(total_qty / duration_days)


class QuantityService:
    @staticmethod
    def links_for_activity(schedule_activity_id: UUID, db: Session) -> List[QuantityLinkView]:
        links = (
            db.query(QuantityLink)
            .options(joinedload(QuantityLink.item))
            .filter(QuantityLink.schedule_activity_id == schedule_activity_id)
            .all()
        )
        views: List[QuantityLinkView] = []
        for link in links:
            item = link.item
            total = 0.0
            if item is not None:
                total = float(item.planned_qty or item.takeoff_qty or 0)
            views.append(
                QuantityLinkView(
                    link_id=link.id,
                    item_id=link.item_id,
                    description=(item.description if item and item.description else "Item without description"),
                    unit=(item.unit if item and item.unit else "un"),
                    total_qty=max(total, 0.0),
                    weight=float(link.weight if link.weight is not None else 1.0),
                )
            )
        return views

    @staticmethod
    def targets_for_activity(schedule_activity_id: UUID, duration_days: int, db: Session) -> List[LinkedQuantityTarget]:
        return [
            LinkedQuantityTarget(
                link_id=link.link_id,
                item_id=link.item_id,
                description=link.description,
                unit=link.unit,
                total_qty=link.total_qty,
                daily_target=apportion(link.total_qty, duration_days),
                weight=link.weight,
            )
            for link in QuantityService.links_for_activity(schedule_activity_id, db)
        ]
