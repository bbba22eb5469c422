"""
Testes do monitor de SLA standalone (scripts/monitor_sla.py).
"""

from datetime import timedelta
from unittest.mock import patch
import threading

from django.core import mail
from django.utils import timezone
import pytest

from scripts.monitor_sla import iniciar_monitor
from src.core.tickets.entities import TicketEntity, TicketPriority
from src.core.tickets.monitor import MonitorSLA


@pytest.fixture
def ticket_em_risco(ticket_repo, requester, categoria):
    ticket = TicketEntity.criar(
        "Servidor de arquivos lento", "Cópias levam minutos", TicketPriority.CRITICA,
        requester.id, categoria.id, timezone.now() - timedelta(hours=7),
    )
    ticket_repo.save(ticket)
    return ticket


def test_um_ciclo(ticket_em_risco):
    assert iniciar_monitor(threading.Event(), uma_vez=True) == 1
    assert "Alerta de SLA" in mail.outbox[0].subject


def test_um_ciclo_sem_tickets(db):
    assert iniciar_monitor(threading.Event(), uma_vez=True) == 0
    assert mail.outbox == []


def test_laco_termina_quando_parar_e_setado(db):
    parar = threading.Event()

    def ciclo(*args, **kwargs):
        parar.set()
        return 0

    with patch.object(MonitorSLA, "executar_ciclo", side_effect=ciclo) as executar_ciclo:
        assert iniciar_monitor(parar) == 0

    executar_ciclo.assert_called_once()
