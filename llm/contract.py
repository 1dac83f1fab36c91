"""Response contract of the task-extraction model.

The hosted model that turns free text into tasks is an external service.
These pydantic models describe the JSON it returns, so the payload is
validated before any task reaches the store. Categories arrive as names,
not ids; resolution to ids happens in services.resolution.
"""

import json
import unicodedata
from enum import Enum
from typing import Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ActionType(str, Enum):
    CREATE = "CREATE"
    LIST = "LIST"
    COMPLETE = "COMPLETE"
    DELETE = "DELETE"
    UNKNOWN = "UNKNOWN"


def _fold(text: str) -> str:
    """Lower-case and strip accents ("Saída" -> "saida")."""
    decomposed = unicodedata.normalize("NFKD", text.strip().lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


class PaymentInfo(BaseModel):
    """Payment details of a financial task."""

    model_config = ConfigDict(populate_by_name=True)

    tipo: Optional[Literal["À vista", "Parcelado"]] = None
    total_parcelas: Optional[int] = Field(default=None, alias="totalParcelas")
    status: Optional[Literal["Não aplicável", "Pendente", "Pago"]] = None
    data_pagamento: Optional[str] = Field(default=None, alias="dataPagamento")


class ExtractedTask(BaseModel):
    """A single task extracted by the model."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: str = Field(min_length=1)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None
    importance: Optional[Literal["baixa", "média", "alta"]] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    value: Optional[str] = None
    fluxo: Optional[str] = None
    payment: Optional[PaymentInfo] = None

    @property
    def priority(self) -> str:
        """Importance mapped to the task priority vocabulary."""
        return _fold(self.importance) if self.importance else "media"

    @property
    def flow(self) -> Optional[str]:
        """Cash-flow direction as 'entrada'/'saida', or None if unknown."""
        if not self.fluxo:
            return None
        folded = _fold(self.fluxo)
        return folded if folded in ("entrada", "saida") else None


class AIResponse(BaseModel):
    """Top-level response of the extraction model."""

    model_config = ConfigDict(populate_by_name=True)

    action: ActionType
    message: str
    created_tasks: List[ExtractedTask] = Field(default_factory=list, alias="createdTasks")
    id: Optional[str] = None


def parse_ai_response(payload: Union[str, bytes, Mapping[str, Any]]) -> AIResponse:
    """Validate a raw model response.

    Args:
        payload: JSON text or an already-decoded mapping.

    Returns:
        The validated AIResponse.

    Raises:
        ValueError: If the payload is not valid JSON or violates the contract.
    """
    try:
        if isinstance(payload, (str, bytes)):
            payload = json.loads(payload)
        return AIResponse.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid AI response: {e}") from e
