"""
Testes do DjangoUnitOfWork.

Testa:
- Commit persiste e só então entrega eventos
- Rollback desfaz gravações e descarta eventos
- Falha do publisher não desfaz a transação confirmada
"""

import pytest

from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork
from src.adapters.django_app.tickets.models import TicketModel
from src.core.tickets.entities import TicketEntity, TicketPriority
from src.core.tickets.events import TicketAcaoRegistradaEvent


@pytest.fixture
def publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def novo_ticket(requester, categoria, relogio):
    return TicketEntity.criar(
        "VPN desconectando", "Cai a cada 10 minutos", TicketPriority.ALTA,
        requester.id, categoria.id, relogio(),
    )


def _evento(ticket):
    return TicketAcaoRegistradaEvent(aggregate_id=ticket.id, descricao="teste")


class TestDjangoUnitOfWork:

    def test_commit(self, ticket_repo, publisher, novo_ticket):
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with uow:
            ticket_repo.save(novo_ticket)
            uow.publish_event(_evento(novo_ticket))
            assert publisher.published_events == []

        assert uow.is_committed
        assert TicketModel.objects.filter(id=novo_ticket.id).exists()
        assert [e.aggregate_id for e in publisher.published_events] == [novo_ticket.id]

    def test_rollback(self, ticket_repo, publisher, novo_ticket):
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with pytest.raises(RuntimeError):
            with uow:
                ticket_repo.save(novo_ticket)
                uow.publish_event(_evento(novo_ticket))
                raise RuntimeError("falha no meio do caso de uso")

        assert uow.is_rolled_back
        assert not TicketModel.objects.filter(id=novo_ticket.id).exists()
        assert publisher.published_events == []

    def test_reutilizavel(self, ticket_repo, publisher, novo_ticket):
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with pytest.raises(RuntimeError):
            with uow:
                raise RuntimeError("primeira falha")

        with uow:
            ticket_repo.save(novo_ticket)

        assert uow.is_committed
        assert TicketModel.objects.filter(id=novo_ticket.id).exists()

    def test_falha_no_publisher(self, ticket_repo, novo_ticket):
        class PublisherQuebrado:
            def publish(self, event):
                raise ConnectionError("broker fora")

        uow = DjangoUnitOfWork(event_publisher=PublisherQuebrado())

        with uow:
            ticket_repo.save(novo_ticket)
            uow.publish_event(_evento(novo_ticket))

        assert TicketModel.objects.filter(id=novo_ticket.id).exists()

    def test_sem_publisher(self, ticket_repo, novo_ticket):
        with DjangoUnitOfWork() as uow:
            ticket_repo.save(novo_ticket)
            uow.publish_event(_evento(novo_ticket))

        assert uow.collect_events() == []
