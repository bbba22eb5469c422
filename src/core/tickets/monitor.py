"""
Monitor de SLA.

A cada ciclo, busca os tickets ativos cujo prazo ainda não venceu
e dispara um alerta para cada um que já consumiu o limiar da janela
(85% por padrão). Não há deduplicação: um ticket continua
alertando a cada ciclo enquanto se qualificar.

Duas formas de execução:
- `executar_ciclo()`: um ciclo isolado (task Celery beat)
- `executar(parar)`: laço contínuo até o `threading.Event` ser setado
"""

from datetime import datetime
from typing import Optional
import logging
import threading

from src.core.shared.relogio import Relogio, agora as relogio_padrao

from .ports import NotificationDispatcher, TicketRepository
from .sla import LIMIAR_ALERTA_PADRAO, deve_alertar

logger = logging.getLogger(__name__)

INTERVALO_PADRAO_SEGUNDOS = 300


class MonitorSLA:
    """
    Varredura periódica de SLA.

    Lê tickets e chama o dispatcher; não altera nenhum estado.

    Attributes:
        ticket_repo: Fonte dos tickets monitorados
        dispatcher: Envio do alerta
        limiar: Fração da janela que dispara o alerta
        intervalo: Segundos entre ciclos no laço contínuo
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        dispatcher: NotificationDispatcher,
        limiar: float = LIMIAR_ALERTA_PADRAO,
        intervalo: float = INTERVALO_PADRAO_SEGUNDOS,
        relogio: Relogio = relogio_padrao,
    ):
        self.ticket_repo = ticket_repo
        self.dispatcher = dispatcher
        self.limiar = limiar
        self.intervalo = intervalo
        self.relogio = relogio

    def executar_ciclo(self, agora: Optional[datetime] = None) -> int:
        """
        Executa um ciclo de verificação.

        Falha ao notificar um ticket é registrada e não interrompe
        os demais.

        Returns:
            Quantidade de alertas enviados com sucesso
        """
        agora = agora or self.relogio()
        enviados = 0

        for ticket in self.ticket_repo.list_monitorados_sla(agora):
            if not deve_alertar(ticket, agora, self.limiar):
                continue

            logger.warning(
                f"SLA em risco: ticket {ticket.id} ({ticket.prioridade.value}) "
                f"vence em {ticket.sla_prazo.isoformat()}"
            )
            try:
                self.dispatcher.notificar_alerta_sla(ticket)
                enviados += 1
            except Exception:
                logger.exception(f"Falha ao enviar alerta de SLA do ticket {ticket.id}")

        return enviados

    def executar(self, parar: threading.Event) -> None:
        """
        Laço contínuo: um ciclo, espera `intervalo`, repete.

        Erro no ciclo é registrado e o laço segue para a próxima
        rodada. Termina assim que `parar` é setado, sem esperar
        o intervalo acabar.
        """
        logger.info(f"Monitor de SLA iniciado (intervalo={self.intervalo}s, limiar={self.limiar})")

        while not parar.is_set():
            try:
                self.executar_ciclo()
            except Exception:
                logger.exception("Erro no ciclo do monitor de SLA")

            parar.wait(self.intervalo)

        logger.info("Monitor de SLA finalizado")
