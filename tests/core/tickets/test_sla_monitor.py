"""
Testes da política de SLA e do MonitorSLA.

- duracao_sla / calcular_prazo por prioridade
- deve_alertar: limiar de 85% da janela
- MonitorSLA: ciclo isolado e laço contínuo
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from src.core.tickets.entities import TicketEntity, TicketPriority, TicketStatus
from src.core.tickets.enums import CommentVisibility
from src.core.tickets.monitor import MonitorSLA
from src.core.tickets.sla import calcular_prazo, deve_alertar, duracao_sla

INICIO = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


def _ticket(prioridade=TicketPriority.ALTA, status=TicketStatus.NOVO):
    ticket = TicketEntity.criar("Sem rede", "Cabo desconectado", prioridade, "u-1", None, INICIO)
    ticket.status = status
    return ticket


class TestPoliticaSLA:

    @pytest.mark.parametrize("prioridade,horas", [
        (TicketPriority.CRITICA, 8),
        (TicketPriority.ALTA, 24),
        (TicketPriority.MEDIA, 48),
        (TicketPriority.BAIXA, 72),
    ])
    def test_duracao_por_prioridade(self, prioridade, horas):
        assert duracao_sla(prioridade) == timedelta(hours=horas)
        assert calcular_prazo(INICIO, prioridade) == INICIO + timedelta(hours=horas)

    def test_alerta_no_limiar_exato(self):
        """24h * 0.85 = 20h24min: o limite exato já dispara."""
        ticket = _ticket()

        assert not deve_alertar(ticket, INICIO + timedelta(hours=20, minutes=23))
        assert deve_alertar(ticket, INICIO + timedelta(hours=20, minutes=24))

    def test_sem_alerta_apos_vencimento(self):
        ticket = _ticket()
        assert not deve_alertar(ticket, ticket.sla_prazo)
        assert not deve_alertar(ticket, ticket.sla_prazo + timedelta(minutes=1))

    @pytest.mark.parametrize("status", [TicketStatus.FECHADO, TicketStatus.CANCELADO])
    def test_sem_alerta_para_inativos(self, status):
        ticket = _ticket(status=status)
        assert not deve_alertar(ticket, INICIO + timedelta(hours=23))

    def test_sem_alerta_sem_prazo(self):
        ticket = _ticket()
        ticket.sla_prazo = None
        assert not deve_alertar(ticket, INICIO + timedelta(hours=23))

    def test_janela_degenerada(self):
        ticket = _ticket()
        ticket.sla_inicio_em = ticket.sla_prazo
        assert not deve_alertar(ticket, ticket.sla_prazo - timedelta(minutes=1))

    def test_limiar_configuravel(self):
        ticket = _ticket()
        assert deve_alertar(ticket, INICIO + timedelta(hours=12), limiar=0.5)


class TestEnums:

    @pytest.mark.parametrize("texto", ["Em Análise", "em análise", "EM_ANALISE"])
    def test_status_from_string(self, texto):
        assert TicketStatus.from_string(texto) == TicketStatus.EM_ANALISE

    def test_valor_desconhecido(self):
        with pytest.raises(ValueError):
            TicketPriority.from_string("Urgentíssima")

    def test_visibilidade(self):
        assert CommentVisibility.from_string("interno") == CommentVisibility.INTERNO


class FalhaNoPrimeiro:
    """Dispatcher que falha no primeiro alerta e aceita os demais."""

    def __init__(self):
        self.alertas = []

    def notificar_acao(self, ticket_id, descricao, email_extra=None):
        pass

    def notificar_alerta_sla(self, ticket):
        if not self.alertas:
            self.alertas.append(None)
            raise RuntimeError("SMTP indisponível")
        self.alertas.append(ticket.id)


class TestMonitorSLA:

    @pytest.fixture
    def tickets(self, ticket_repo):
        em_risco = _ticket()
        tranquilo = _ticket(TicketPriority.BAIXA)
        vencido = _ticket(TicketPriority.CRITICA)
        fechado = _ticket(status=TicketStatus.FECHADO)
        for t in (em_risco, tranquilo, vencido, fechado):
            ticket_repo.save(t)
        return em_risco, tranquilo, vencido, fechado

    def test_ciclo_alerta_somente_em_risco(self, ticket_repo, dispatcher, tickets):
        em_risco = tickets[0]
        monitor = MonitorSLA(ticket_repo, dispatcher)

        enviados = monitor.executar_ciclo(INICIO + timedelta(hours=21))

        assert enviados == 1
        assert dispatcher.alertas == [em_risco.id]

    def test_ciclos_repetem_alerta(self, ticket_repo, dispatcher, tickets):
        """Sem deduplicação: o mesmo ticket alerta em cada ciclo."""
        monitor = MonitorSLA(ticket_repo, dispatcher)
        agora = INICIO + timedelta(hours=21)

        monitor.executar_ciclo(agora)
        monitor.executar_ciclo(agora + timedelta(minutes=5))

        assert dispatcher.alertas == [tickets[0].id, tickets[0].id]

    def test_monitor_nao_altera_tickets(self, ticket_repo, dispatcher, tickets):
        MonitorSLA(ticket_repo, dispatcher).executar_ciclo(INICIO + timedelta(hours=21))

        salvo = ticket_repo.get_by_id(tickets[0].id)
        assert salvo.versao == 1
        assert salvo.status == TicketStatus.NOVO

    def test_falha_de_envio_nao_interrompe_ciclo(self, ticket_repo):
        for _ in range(3):
            ticket_repo.save(_ticket())
        dispatcher = FalhaNoPrimeiro()

        enviados = MonitorSLA(ticket_repo, dispatcher).executar_ciclo(INICIO + timedelta(hours=22))

        assert enviados == 2
        assert len(dispatcher.alertas) == 3

    def test_usa_relogio_quando_agora_omitido(self, ticket_repo, dispatcher, tickets):
        monitor = MonitorSLA(ticket_repo, dispatcher, relogio=lambda: INICIO + timedelta(hours=1))

        assert monitor.executar_ciclo() == 0

    def test_laco_termina_quando_parar_e_setado(self, ticket_repo, dispatcher, tickets):
        parar = threading.Event()
        ciclos = []

        class MonitorContado(MonitorSLA):
            def executar_ciclo(self, agora=None):
                ciclos.append(agora)
                parar.set()
                return 0

        monitor = MonitorContado(ticket_repo, dispatcher, intervalo=60)
        thread = threading.Thread(target=monitor.executar, args=(parar,))
        thread.start()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert len(ciclos) == 1

    def test_erro_no_ciclo_nao_derruba_laco(self, ticket_repo, dispatcher):
        parar = threading.Event()
        chamadas = []

        class MonitorInstavel(MonitorSLA):
            def executar_ciclo(self, agora=None):
                chamadas.append(1)
                if len(chamadas) == 1:
                    raise RuntimeError("banco fora")
                parar.set()
                return 0

        monitor = MonitorInstavel(ticket_repo, dispatcher, intervalo=0.01)
        monitor.executar(parar)

        assert len(chamadas) == 2
