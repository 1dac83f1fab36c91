from dataclasses import dataclass, field
from typing import Any, Dict, Optional

PRIORITIES = ("baixa", "media", "alta")
STATUSES = ("pendente", "em_andamento", "aguardando", "concluida")
FLOWS = ("entrada", "saida")


@dataclass
class Task:
    id: str
    owner: str
    title: str
    category_id: Optional[str]  # must resolve to one of the owner's categories
    subcategory_id: Optional[str] = None
    description: str = ""
    priority: str = "media"
    status: str = "pendente"
    type: str = "tarefa"
    due_date: Optional[str] = None
    start_date: Optional[str] = None
    recurrence: Optional[str] = None
    order: int = 0
    value: Optional[str] = None  # free-text money amount, e.g. "150,00"
    flow: Optional[str] = None  # 'entrada' or 'saida'
    payment: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    shared: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Task":
        """Build a Task from a stored document, keeping unknown fields in extra."""
        known = {
            "id", "owner", "title", "category_id", "subcategory_id", "description",
            "priority", "status", "type", "due_date", "start_date", "recurrence",
            "order", "value", "flow", "payment", "created_at", "updated_at",
            "shared", "metadata",
        }
        return cls(
            id=doc["id"],
            owner=doc.get("owner", ""),
            title=doc.get("title", ""),
            category_id=doc.get("category_id") or None,
            subcategory_id=doc.get("subcategory_id") or None,
            description=doc.get("description") or "",
            priority=doc.get("priority") or "media",
            status=doc.get("status") or "pendente",
            type=doc.get("type") or "tarefa",
            due_date=doc.get("due_date"),
            start_date=doc.get("start_date"),
            recurrence=doc.get("recurrence"),
            order=doc.get("order") or 0,
            value=doc.get("value"),
            flow=doc.get("flow"),
            payment=doc.get("payment"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            shared=bool(doc.get("shared", False)),
            metadata=dict(doc.get("metadata") or {}),
            extra={k: v for k, v in doc.items() if k not in known},
        )

    def to_document(self) -> Dict[str, Any]:
        """Convert task to a document for storage (without id)."""
        doc = dict(self.extra)
        doc.update(
            {
                "owner": self.owner,
                "title": self.title,
                "description": self.description,
                "category_id": self.category_id,
                "subcategory_id": self.subcategory_id,
                "priority": self.priority,
                "status": self.status,
                "type": self.type,
                "due_date": self.due_date,
                "start_date": self.start_date,
                "recurrence": self.recurrence,
                "order": self.order,
                "value": self.value,
                "flow": self.flow,
                "payment": self.payment,
                "created_at": self.created_at,
                "updated_at": self.updated_at,
                "shared": self.shared,
                "metadata": self.metadata,
            }
        )
        return doc
