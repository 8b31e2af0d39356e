"""
Pending tasks: open maintenance requests, unpaid bills falling due and leases
about to end, merged into one list, then filtered, sorted and paginated.

Tasks are synthesized on every request and never stored.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from app.finance.collaborators import BillRecord, LeaseRecord, MaintenanceRecord, TaskSource
from app.finance.errors import CollaboratorError, ValidationError, call_source
from app.schemas.financial import PendingTask, PendingTasksFilter, PendingTasksOut

logger = logging.getLogger(__name__)

OPERATION = "get_pending_tasks"

BILL_LOOKAHEAD_DAYS = 7
LEASE_LOOKAHEAD_DAYS = 30
MAINTENANCE_DEFAULT_DUE_DAYS = 3

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
STATUSES = ("pending", "in_progress", "completed")
TASK_TYPES = ("maintenance", "rent", "contract")
SORT_FIELDS = ("due_date", "priority")
SORT_ORDERS = ("asc", "desc")


def empty_pending_tasks(page: int = 1, limit: int = 5) -> PendingTasksOut:
    return PendingTasksOut(tasks=[], total=0, page=page, limit=limit)


def _normalize_priority(value: Optional[str]) -> str:
    value = (value or "").strip().lower()
    return value if value in PRIORITY_ORDER else "medium"


def _normalize_status(value: Optional[str]) -> str:
    value = (value or "").strip().lower().replace("-", "_")
    if value in ("in_progress", "completed"):
        return value
    # PENDING, SCHEDULED and anything unknown are still waiting to be handled
    return "pending"


def _choice(value: Optional[str], allowed: Iterable[str], field: str) -> None:
    allowed = tuple(allowed)
    if value is not None and value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}", details={field: value})


def validate_filter(filters: PendingTasksFilter) -> None:
    if filters.page < 1:
        raise ValidationError("page must be >= 1", details={"page": filters.page})
    if filters.limit < 1:
        raise ValidationError("limit must be >= 1", details={"limit": filters.limit})
    _choice(filters.status, STATUSES, "status")
    _choice(filters.priority, PRIORITY_ORDER, "priority")
    _choice(filters.type, TASK_TYPES, "type")
    _choice(filters.sort_by, SORT_FIELDS, "sort_by")
    _choice(filters.sort_order, SORT_ORDERS, "sort_order")


def maintenance_to_task(record: MaintenanceRecord, now: datetime) -> PendingTask:
    return PendingTask(
        id=str(record.id),
        title=f"Repair: {record.title}",
        description=record.description or f"Repair {record.title} at {record.property_name}",
        due_date=record.scheduled_date or now + timedelta(days=MAINTENANCE_DEFAULT_DUE_DAYS),
        priority=_normalize_priority(record.priority),
        status=_normalize_status(record.status),
        type="maintenance",
        property_id=str(record.property_id),
        property_name=record.property_name or "",
        unit_id=record.unit_id,
        unit_name=record.unit_name,
    )


def bill_to_task(record: BillRecord, now: datetime) -> PendingTask:
    label = "rent" if (record.rent_amount or 0) > 0 else "maintenance fee"
    overdue = record.due_date < now
    return PendingTask(
        id=str(record.id),
        title=f"Collect {label}",
        description=f"Collect {label} for {record.property_name} ({record.total_amount})",
        due_date=record.due_date,
        priority="high" if overdue else _normalize_priority(record.priority),
        status="pending",
        type="rent",
        property_id=str(record.property_id),
        property_name=record.property_name or "",
        unit_id=record.unit_id,
        unit_name=record.unit_name,
    )


def lease_to_task(record: LeaseRecord) -> PendingTask:
    return PendingTask(
        id=str(record.id),
        title="Renew lease",
        description=f"Renew lease with {record.tenant_name} for {record.property_name}",
        due_date=record.contract_end_date,
        priority="high",
        status="pending",
        type="contract",
        property_id=str(record.property_id),
        property_name=record.property_name or "",
        unit_id=record.unit_id,
        unit_name=record.unit_name,
    )


def filter_tasks(tasks: List[PendingTask], filters: PendingTasksFilter) -> List[PendingTask]:
    """Keep tasks matching every filter that was given."""
    def matches(task: PendingTask) -> bool:
        if filters.status and task.status != filters.status:
            return False
        if filters.priority and task.priority != filters.priority:
            return False
        if filters.type and task.type != filters.type:
            return False
        if filters.property_id and task.property_id != str(filters.property_id):
            return False
        return True

    return [t for t in tasks if matches(t)]


def sort_tasks(tasks: List[PendingTask], sort_by: str = "due_date", sort_order: str = "asc") -> List[PendingTask]:
    """
    Sort on `sort_by`, breaking ties on the other field, both in `sort_order`.

    Ascending priority means most urgent first (high, medium, low).
    """
    def key(task: PendingTask):
        rank = PRIORITY_ORDER[task.priority]
        if sort_by == "priority":
            return rank, task.due_date
        return task.due_date, rank

    return sorted(tasks, key=key, reverse=(sort_order == "desc"))


def paginate(tasks: List[PendingTask], page: int, limit: int) -> List[PendingTask]:
    offset = (page - 1) * limit
    return tasks[offset:offset + limit]


class PendingTaskAggregator:
    def __init__(self, sources: TaskSource, clock: Callable[[], datetime] = datetime.now):
        self.sources = sources
        self.clock = clock

    def collect(self, user_id: str, filters: PendingTasksFilter) -> List[PendingTask]:
        """Pull the three record sets and map them into one unfiltered task list."""
        now = self.clock()
        maintenance = call_source(OPERATION, filters, self.sources.list_open_maintenance, user_id) or []
        bills = call_source(
            OPERATION, filters, self.sources.list_due_soon_bills, user_id, BILL_LOOKAHEAD_DAYS
        ) or []
        leases = call_source(
            OPERATION, filters, self.sources.list_expiring_leases, user_id, LEASE_LOOKAHEAD_DAYS
        ) or []

        tasks = [maintenance_to_task(r, now) for r in maintenance]
        tasks += [bill_to_task(r, now) for r in bills]
        tasks += [lease_to_task(r) for r in leases]
        return tasks

    def get_pending_tasks(
        self,
        user_id: str,
        filters: Optional[PendingTasksFilter] = None,
        fallback_on_error: bool = False,
    ) -> PendingTasksOut:
        filters = filters or PendingTasksFilter()
        validate_filter(filters)

        try:
            tasks = self.collect(user_id, filters)
        except CollaboratorError:
            if not fallback_on_error:
                raise
            logger.warning(f"Returning empty task list after data source failure | user_id={user_id}")
            return empty_pending_tasks(filters.page, filters.limit)

        matching = sort_tasks(filter_tasks(tasks, filters), filters.sort_by, filters.sort_order)
        return PendingTasksOut(
            tasks=paginate(matching, filters.page, filters.limit),
            total=len(matching),
            page=filters.page,
            limit=filters.limit,
        )
