# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/transaction.py

Borde transaccional de bookkeeping.

comprehensive_transaction() abre una sesión, ejecuta la operación,
persiste los eventos acumulados (idempotentes por hash) dentro de la misma
transacción, hace commit y solo entonces entrega los efectos al callback
on_committed. Ante cualquier excepción: rollback, sin despacho, re-raise.

Ejemplo:

    output = await comprehensive_transaction(
        lambda session, effects: process_stripe_charge_for_checkout_session(
            session, checkout_session_id=cs_id, charge=charge,
        ),
        on_committed=dispatch_effects,
    )

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.config import get_billing_settings
from app.shared.database import get_session_factory

from .effects import TransactionEffects, TransactionOutput
from .repositories import EventRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

TransactionFn = Callable[[AsyncSession, TransactionEffects], Awaitable[Union[TransactionOutput[T], T]]]
OnCommitted = Callable[[TransactionEffects], Any]


async def persist_events(
    session: AsyncSession,
    effects: TransactionEffects,
    events: Optional[EventRepository] = None,
) -> int:
    """Inserta los eventos acumulados; los ya existentes (mismo hash) se omiten."""
    events = events or EventRepository()
    inserted = 0
    for event in effects.events:
        if await events.insert_if_absent(session, **event.as_row()):
            inserted += 1
    return inserted


async def comprehensive_transaction(
    fn: TransactionFn,
    *,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    on_committed: Optional[OnCommitted] = None,
) -> TransactionOutput[Any]:
    """
    Ejecuta fn(session, effects) en una transacción.

    fn puede devolver un TransactionOutput (sus efectos se fusionan con los
    acumulados) o un valor plano.

    Returns:
        TransactionOutput con el resultado y todos los efectos

    Raises:
        Cualquier excepción de fn o del commit (tras rollback)
    """
    factory = session_factory or get_session_factory()
    effects = TransactionEffects()

    async with factory() as session:
        try:
            async with session.begin():
                value = await fn(session, effects)
                if isinstance(value, TransactionOutput):
                    effects.merge(value.effects)
                    result = value.result
                else:
                    result = value

                inserted = 0
                if get_billing_settings().emit_events:
                    inserted = await persist_events(session, effects)
        except Exception:
            logger.warning(
                "transaction_rolled_back events=%d tasks=%d",
                len(effects.events),
                len(effects.tasks),
                exc_info=True,
            )
            raise

    logger.info(
        "transaction_committed events=%d events_inserted=%d ledger_commands=%d tasks=%d",
        len(effects.events),
        inserted,
        len(effects.ledger_commands),
        len(effects.tasks),
    )
    if on_committed is not None and not effects.is_empty:
        dispatched = on_committed(effects)
        if inspect.isawaitable(dispatched):
            await dispatched
    return TransactionOutput(result=result, effects=effects)


__all__ = ["comprehensive_transaction", "persist_events"]
