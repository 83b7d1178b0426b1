"""
Merge rule for reservations.

Within a showing the claimant name (exact match, after trimming) is the merge
key: a claimant holds at most one reservation per showing. Any write that would
give a claimant a second record instead folds the tickets into the existing one,
so the per-person limit always applies to the claimant's whole holding.
"""
from dataclasses import dataclass
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from boxoffice.core.config import EngineConfig
from boxoffice.core.exceptions import PerPersonLimitError
from boxoffice.models.reservation import Reservation
from boxoffice.models.showing import Showing
from boxoffice.services.ledger import ensure_admissible


@dataclass(frozen=True)
class MergePlan:
    showing: Showing
    customer_name: str
    tickets: int                              # claimant's total once the plan is applied
    absorber: Optional[Reservation] = None    # existing record that takes the total

    @property
    def is_merge(self) -> bool:
        return self.absorber is not None


def find_by_customer(
    db: Session,
    showing_id: UUID,
    customer_name: str,
    ignore_ids: Iterable[UUID] = (),
) -> Optional[Reservation]:
    query = db.query(Reservation).filter(
        Reservation.showing_id == showing_id,
        Reservation.customer_name == customer_name,
    )
    ignore_ids = list(ignore_ids)
    if ignore_ids:
        query = query.filter(Reservation.id.notin_(ignore_ids))
    return query.first()


def plan_merge(
    db: Session,
    showing: Showing,
    customer_name: str,
    incoming: int,
    config: EngineConfig,
    ignore_ids: Iterable[UUID] = (),
) -> MergePlan:
    """
    Decide where ``incoming`` tickets for ``customer_name`` land in ``showing``.

    ``ignore_ids`` are reservations the caller is about to replace (an edited
    record); they are neither merge candidates nor counted against capacity.
    Raises PerPersonLimitError or CapacityError; touches nothing.
    """
    ignore_ids = list(ignore_ids)
    existing = find_by_customer(db, showing.id, customer_name, ignore_ids)
    limit = config.max_tickets_per_person

    if existing:
        total = existing.tickets + incoming
        if total > limit:
            raise PerPersonLimitError(limit=limit, attempted=total, current=existing.tickets)
        ensure_admissible(db, showing, total, exclude_ids=ignore_ids + [existing.id])
        return MergePlan(showing=showing, customer_name=customer_name, tickets=total, absorber=existing)

    if incoming > limit:
        raise PerPersonLimitError(limit=limit, attempted=incoming)
    ensure_admissible(db, showing, incoming, exclude_ids=ignore_ids)
    return MergePlan(showing=showing, customer_name=customer_name, tickets=incoming)
