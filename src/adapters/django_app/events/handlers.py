"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers rodam no worker Celery quando o publisher está em modo
`celery`. No modo `sync`, o container registra
`notificar_acao_registrada` direto no LoggingEventPublisher.

Resiliência:
- Falha de transporte de e-mail (NotificationDeliveryError) é
  re-tentada pelo próprio Celery (autoretry_for)
- Qualquer outro erro é logado e re-lançado

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        ...

Tarefa agendada (beat):
- verificar_sla_tickets: um ciclo do MonitorSLA
"""

from typing import Any, Dict
import logging

from celery import shared_task

from src.core.tickets.events import TicketAcaoRegistradaEvent
from src.core.tickets.ports import NotificationDispatcher
from src.adapters.django_app.notifications.services import NotificationDeliveryError

logger = logging.getLogger(__name__)


def notificar_acao_registrada(
    event: TicketAcaoRegistradaEvent,
    dispatcher: NotificationDispatcher,
) -> None:
    """Envia a notificação correspondente a uma ação de ticket."""
    dispatcher.notificar_acao(
        ticket_id=event.aggregate_id,
        descricao=event.descricao,
        email_extra=event.email_extra,
    )


# =============================================================================
# Event Handlers - Tickets
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(NotificationDeliveryError,),
    acks_late=True,
)
def handle_ticket_acao_registrada(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para TicketAcaoRegistradaEvent.

    Ações:
    - E-mail para solicitante, responsável e e-mail extra do evento

    Args:
        event_data: Evento no formato de DomainEvent.to_dict()
    """
    event = TicketAcaoRegistradaEvent.from_dict(event_data)

    logger.info(
        f"[HANDLER] TicketAcaoRegistrada: {event.aggregate_id} | "
        f"{event.descricao}"
    )

    try:
        from src.config.container import get_container

        dispatcher = get_container().notification_dispatcher()
        notificar_acao_registrada(event, dispatcher)
    except NotificationDeliveryError as e:
        logger.warning(
            f"Falha de entrega para ticket {event.aggregate_id} "
            f"(tentativa {self.request.retries + 1}): {e}"
        )
        raise
    except Exception as e:
        logger.error(f"Erro no handler TicketAcaoRegistrada: {e}", exc_info=True)
        raise


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    'TicketAcaoRegistradaEvent': handle_ticket_acao_registrada,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Ponto de entrada de todos os eventos publicados pelo
    CeleryEventPublisher; roteia para a task do tipo.

    Args:
        event_type: Tipo do evento (ex: 'TicketAcaoRegistradaEvent')
        event_data: Dados do evento serializado
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
    else:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def verificar_sla_tickets(self) -> int:
    """
    Executa um ciclo do monitor de SLA.

    Agendada pelo Celery Beat a cada SLA_MONITOR_INTERVAL_SECONDS.

    Returns:
        Número de alertas enviados
    """
    logger.info("[SCHEDULED] Verificando SLA dos tickets...")

    try:
        from src.config.container import get_container

        enviados = get_container().monitor_sla().executar_ciclo()
    except Exception as e:
        logger.error(f"Erro ao verificar SLA: {e}", exc_info=True)
        return 0

    logger.info(f"[SCHEDULED] {enviados} alertas de SLA enviados")
    return enviados
