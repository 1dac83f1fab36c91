"""Task service for document store operations."""

from dataclasses import dataclass, field
from typing import List, Optional

from db.store import utc_now
from errors import NotFound
from logger import get_logger
from models.task import PRIORITIES, Task

logger = get_logger(__name__)

TASKS = "tasks"


@dataclass
class TaskFilters:
    """Client-side filters for listing tasks.

    Attributes:
        status: Keep tasks whose status is in this list (empty means all).
        category_id: Keep tasks in this category.
        priority: Keep tasks with this priority.
        search: Case-insensitive substring matched against title and description.
    """

    status: List[str] = field(default_factory=list)
    category_id: Optional[str] = None
    priority: Optional[str] = None
    search: Optional[str] = None

    def matches(self, task: Task) -> bool:
        if self.status and task.status not in self.status:
            return False
        if self.category_id and task.category_id != self.category_id:
            return False
        if self.priority and task.priority != self.priority:
            return False
        if self.search:
            term = self.search.lower()
            if term not in task.title.lower() and term not in (
                task.description or ""
            ).lower():
                return False
        return True


def _clean_payload(fields: dict) -> dict:
    """Drop the id and turn empty strings into None before writing."""
    return {k: (None if v == "" else v) for k, v in fields.items() if k != "id"}


class TaskService:
    """Service for managing tasks."""

    def __init__(self, store):
        """Initialize the task service.

        Args:
            store: DocumentStore instance.
        """
        self.store = store

    def find_all(self, owner: str, filters: Optional[TaskFilters] = None) -> List[Task]:
        """Get a user's tasks, sorted and filtered client-side.

        Tasks are ordered by their order field, then newest first.

        Args:
            owner: User id.
            filters: Optional TaskFilters.

        Returns:
            List of Task objects.
        """
        tasks = [Task.from_document(doc) for doc in self.store.query(TASKS, "owner", owner)]

        # Two stable passes: newest first, then by order
        tasks.sort(key=lambda t: t.created_at or "", reverse=True)
        tasks.sort(key=lambda t: t.order or 0)

        if filters:
            tasks = [t for t in tasks if filters.matches(t)]
        return tasks

    def find(self, task_id: str) -> Optional[Task]:
        doc = self.store.get(TASKS, task_id)
        return Task.from_document(doc) if doc else None

    def create(self, owner: str, **fields) -> Task:
        """Create a task with defaults for any missing field.

        Returns:
            The created Task.
        """
        doc = self.store.create(TASKS, self._new_task_document(owner, fields))
        logger.info(f"Created task '{doc['title']}' ({doc['id']})")
        return Task.from_document(doc)

    def update(self, task_id: str, **fields) -> Task:
        """Update a task, refreshing updated_at.

        Empty strings are stored as None.

        Raises:
            NotFound: If the task doesn't exist.
        """
        payload = _clean_payload(fields)
        payload["updated_at"] = utc_now()
        self.store.update(TASKS, task_id, payload)
        return self.find(task_id)

    def delete(self, task_id: str) -> bool:
        return self.store.delete(TASKS, task_id)

    def delete_all(self, owner: str) -> int:
        """Delete every task of a user in a single batch.

        Returns:
            Number of tasks deleted.
        """
        batch = self.store.batch()
        for doc in self.store.query(TASKS, "owner", owner):
            batch.delete(TASKS, doc["id"])
        return batch.commit()

    def toggle_status(self, task_id: str) -> Task:
        """Flip a task between pendente and concluida."""
        task = self.find(task_id)
        if task is None:
            raise NotFound(f"Task with ID {task_id} not found")

        new_status = "pendente" if task.status == "concluida" else "concluida"
        return self.update(task_id, status=new_status)

    def set_priority(self, task_id: str, priority: str) -> Task:
        if priority not in PRIORITIES:
            raise ValueError(f"Invalid priority: {priority}")
        return self.update(task_id, priority=priority)

    def share(self, task_id: str) -> Task:
        """Make a task reachable through its public link."""
        task = self.find(task_id)
        if task is None:
            raise NotFound(f"Task with ID {task_id} not found")
        if task.shared:
            return task
        logger.info(f"Sharing task '{task.title}' ({task_id})")
        return self.update(task_id, shared=True)

    def get_public(self, task_id: str) -> Optional[Task]:
        """Get a task for someone outside the account.

        Returns:
            The Task if it exists and has been shared, None otherwise.
        """
        task = self.find(task_id)
        if task is None or not task.shared:
            return None
        return task

    def accept_externally(self, task_id: str, name: str) -> Task:
        """Record that someone outside the account took on a shared task.

        Raises:
            ValueError: If the name is empty.
            NotFound: If the task doesn't exist or isn't shared.
        """
        task, name = self._public_task(task_id, name)
        metadata = dict(task.metadata)
        metadata["accepted_by_name"] = name
        metadata["accepted_at"] = utc_now()
        logger.info(f"Task {task_id} accepted by '{name}'")
        return self.update(task_id, metadata=metadata)

    def complete_externally(self, task_id: str, name: str) -> Task:
        """Mark a shared task done on behalf of someone outside the account.

        Raises:
            ValueError: If the name is empty.
            NotFound: If the task doesn't exist or isn't shared.
        """
        task, name = self._public_task(task_id, name)
        metadata = dict(task.metadata)
        metadata["completed_by_external"] = True
        metadata["external_completer_name"] = name
        metadata["completed_at"] = utc_now()
        logger.info(f"Task {task_id} completed by '{name}'")
        return self.update(task_id, status="concluida", metadata=metadata)

    def _public_task(self, task_id: str, name: str):
        name = (name or "").strip()
        if not name:
            raise ValueError("A name is required")
        task = self.get_public(task_id)
        if task is None:
            raise NotFound(f"Shared task with ID {task_id} not found")
        return task, name

    def create_bulk(self, owner: str, extracted_tasks, resolver) -> List[str]:
        """Create tasks extracted by the AI layer in one batch.

        Category and subcategory arrive as free-text names and are resolved
        to ids by the resolver, which applies its fallback policy.

        Args:
            owner: User id.
            extracted_tasks: Iterable of ExtractedTask.
            resolver: CategoryResolver.

        Returns:
            Ids of the created tasks.
        """
        batch = self.store.batch()
        ids = []

        for extracted in extracted_tasks:
            placement = resolver.resolve(
                owner, extracted.category, extracted.subcategory
            )
            if not placement.matched:
                logger.warning(
                    f"Category '{extracted.category}' not found for task "
                    f"'{extracted.title}', using fallback {placement.category_id}"
                )

            fields = {
                "title": extracted.title,
                "description": extracted.description or "",
                "category_id": placement.category_id,
                "subcategory_id": placement.subcategory_id,
                "priority": extracted.priority,
                "start_date": extracted.start_date,
                "due_date": extracted.end_date,
                "value": extracted.value,
                "flow": extracted.flow,
                "payment": (
                    extracted.payment.model_dump(exclude_none=True)
                    if extracted.payment
                    else None
                ),
            }
            ids.append(batch.create(TASKS, self._new_task_document(owner, fields)))

        count = batch.commit()
        logger.info(f"Created {count} task(s) in bulk for {owner}")
        return ids

    def _new_task_document(self, owner: str, fields: dict) -> dict:
        now = utc_now()
        doc = _clean_payload(fields)
        doc.update(
            {
                "owner": owner,
                "title": fields.get("title") or "Nova Tarefa",
                "description": fields.get("description") or "",
                "category_id": fields.get("category_id") or None,
                "subcategory_id": fields.get("subcategory_id") or None,
                "priority": fields.get("priority") or "media",
                "status": fields.get("status") or "pendente",
                "type": fields.get("type") or "tarefa",
                "order": fields.get("order") or 0,
                "created_at": now,
                "updated_at": now,
            }
        )
        return doc
