# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/effects.py

Efectos diferidos de una transacción de bookkeeping.

Las operaciones de reconciliación no emiten eventos ni encolan comandos
directamente: los acumulan en un TransactionEffects y devuelven
TransactionOutput(result, effects). Solo el borde de la transacción
(transaction.py) los persiste/despacha, y únicamente después del commit.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from .enums import EventType
from .utils.datetime_helpers import utcnow

T = TypeVar("T")


def event_hash(event_type: EventType | str, object_id: str) -> str:
    """Hash determinista de un evento lógico (tipo + objeto)."""
    raw = f"{EventType(event_type).value}:{object_id}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass
class DomainEventInsert:
    """Evento de dominio pendiente de insertar en la tabla events."""

    type: EventType
    organization_id: str
    object_id: str
    payload: dict[str, Any]
    livemode: bool
    occurred_at: datetime = field(default_factory=utcnow)

    @property
    def hash(self) -> str:
        return event_hash(self.type, self.object_id)

    def as_row(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "organization_id": self.organization_id,
            "hash": self.hash,
            "payload": {"object_id": self.object_id, **self.payload},
            "occurred_at": self.occurred_at,
            "livemode": self.livemode,
        }


@dataclass
class LedgerCommand:
    """Comando para el subsistema de ledger (consumido fuera de este módulo)."""

    type: str
    organization_id: str
    livemode: bool
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class DeferredTask:
    """Trabajo de seguimiento a ejecutar tras el commit (p.ej. plan free)."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class TransactionEffects:
    events: list[DomainEventInsert] = field(default_factory=list)
    ledger_commands: list[LedgerCommand] = field(default_factory=list)
    tasks: list[DeferredTask] = field(default_factory=list)

    def emit(self, event: DomainEventInsert) -> None:
        # Un mismo evento lógico solo se acumula una vez
        if any(e.hash == event.hash for e in self.events):
            return
        self.events.append(event)

    def enqueue_ledger_command(self, command: LedgerCommand) -> None:
        self.ledger_commands.append(command)

    def add_task(self, task: DeferredTask) -> None:
        self.tasks.append(task)

    def merge(self, other: Optional["TransactionEffects"]) -> "TransactionEffects":
        if other is None:
            return self
        for event in other.events:
            self.emit(event)
        self.ledger_commands.extend(other.ledger_commands)
        self.tasks.extend(other.tasks)
        return self

    @property
    def is_empty(self) -> bool:
        return not (self.events or self.ledger_commands or self.tasks)


@dataclass
class TransactionOutput(Generic[T]):
    """Envelope {result, effects} que devuelve toda operación mutante."""

    result: T
    effects: TransactionEffects = field(default_factory=TransactionEffects)


__all__ = [
    "event_hash",
    "DomainEventInsert",
    "LedgerCommand",
    "DeferredTask",
    "TransactionEffects",
    "TransactionOutput",
]
