"""
Domain Events do Domínio de Tickets.

Cada operação que altera um ticket grava uma entrada de auditoria
e enfileira um TicketAcaoRegistradaEvent no UnitOfWork. Após o
commit, o publisher entrega o evento ao handler que envia a
notificação por e-mail.

Uso:
    with uow:
        ticket.alterar_prioridade(prioridade, agora)
        repo.save(ticket)
        acoes.add(acao)
        uow.publish_event(TicketAcaoRegistradaEvent(
            aggregate_id=ticket.id,
            descricao=acao.descricao,
        ))
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketAcaoRegistradaEvent(DomainEvent):
    """
    Evento: uma ação foi registrada no histórico do ticket.

    Handlers típicos:
    - Notificar solicitante e responsável por e-mail

    Attributes:
        descricao: Texto da entrada de auditoria
        email_extra: Destinatário adicional (ex: agent recém-atribuído)
    """

    descricao: str = ""
    email_extra: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "descricao": self.descricao,
            "email_extra": self.email_extra,
        }
