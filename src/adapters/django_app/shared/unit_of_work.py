"""
Unit of Work - Implementação Django.

Gerencia a transação que envolve um caso de uso: estado do ticket,
entradas de auditoria, comentários e anexos são gravados juntos.

Responsabilidades:
- Abrir/fechar o bloco atômico do Django
- Commit/Rollback coordenado
- Publicar eventos enfileirados somente após commit bem-sucedido

Eventos funcionam como outbox: o caso de uso enfileira com
`uow.publish_event(...)`, e a entrega ao EventPublisher acontece
depois que a transação fecha. Falha na entrega é logada e não
desfaz a operação já confirmada.
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.interfaces import EventPublisher, UnitOfWork
from src.core.shared.events import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Usa `transaction.atomic()` aberto manualmente, o que permite
    aninhar dentro de outro bloco atômico (ex.: testes com banco ou
    ATOMIC_REQUESTS) virando um savepoint.

    Example:
        with DjangoUnitOfWork(event_publisher=publisher) as uow:
            repo.save(ticket)
            acao_repo.add(acao)
            uow.publish_event(TicketAcaoRegistradaEvent(...))
        # Commit + eventos entregues ao publisher

    Example com rollback:
        with DjangoUnitOfWork() as uow:
            repo.save(ticket)
            raise ValidationError("...")
        # Rollback, eventos descartados
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        """
        Args:
            event_publisher: Publicador de eventos (log, Celery, memória)
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        # Instância reutilizável: cada `with` é uma nova transação
        self._committed = False
        self._rolled_back = False
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Confirma a transação e publica eventos.

        Ordem de execução:
        1. Fechar o bloco atômico (commit ou release do savepoint)
        2. Publicar eventos para o publisher
        3. Limpar estado interno

        Raises:
            Exception: Se o commit falhar, re-lança após descartar eventos
        """
        if self._committed or self._rolled_back:
            logger.warning("Transaction already finalized")
            return

        try:
            if self._atomic is not None:
                atomic, self._atomic = self._atomic, None
                atomic.__exit__(None, None, None)
                logger.debug("Transaction committed")
        except Exception as e:
            logger.error(f"Commit failed: {e}")
            self._rolled_back = True
            self.clear_events()
            raise

        self._committed = True

        if self._events:
            self._publish_events()

    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        if self._committed or self._rolled_back:
            return

        try:
            if self._atomic is not None:
                atomic, self._atomic = self._atomic, None
                transaction.set_rollback(True)
                atomic.__exit__(None, None, None)
                logger.debug("Transaction rolled back")
        except Exception as e:
            logger.error(f"Rollback failed: {e}")
        finally:
            self._rolled_back = True
            self.clear_events()

    def _publish_events(self) -> None:
        """
        Entrega eventos ao publisher, na ordem em que foram enfileirados.

        Sem publisher configurado, apenas loga.
        """
        eventos = list(self._events)
        self.clear_events()

        for event in eventos:
            logger.info(
                f"Publishing event: {event.event_type} "
                f"for aggregate {event.aggregate_id}"
            )

            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    # Operação já confirmada; entrega é best-effort
                    logger.error(f"Failed to publish event {event.event_id}: {e}")

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Não persiste nada - simula o ciclo commit/rollback e guarda os
    eventos "publicados". Com publisher configurado, entrega a ele
    também, permitindo testar o fluxo de notificações sem banco.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        pass

    def commit(self) -> None:
        self._committed = True
        eventos = list(self._events)
        self.clear_events()
        self._published_events.extend(eventos)
        if self._event_publisher:
            for event in eventos:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Failed to publish event {event.event_id}: {e}")

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Eventos entregues após commits."""
        return self._published_events
