"""
Domínio de Tickets - Chamados de Suporte.

Este módulo contém toda a lógica de negócio relacionada a tickets
de suporte técnico, incluindo:
- Entidades (TicketEntity, TicketAcaoEntity, TicketComentarioEntity, AnexoEntity)
- Política e monitor de SLA
- Use Cases do ciclo de vida, comentários e anexos
- Domain Events (TicketAcaoRegistrada)
- DTOs (Input/Output Data Transfer Objects)
- Ports (Interfaces para repositórios, storage e notificações)

Características do Domínio:
- SLA calculado por prioridade e reiniciado em troca de prioridade/reabertura
- Transições de status controladas, com exigência de ator por aresta
- Toda alteração grava auditoria na mesma transação
- Notificações disparadas por eventos, após o commit
"""

from .enums import TicketStatus, TicketPriority, CommentVisibility
from .entities import (
    TicketEntity,
    TicketAcaoEntity,
    TicketComentarioEntity,
    AnexoEntity,
)
from .events import TicketAcaoRegistradaEvent
from .ports import (
    TicketRepository,
    TicketAcaoRepository,
    ComentarioRepository,
    AnexoRepository,
    FileStorage,
    NotificationDispatcher,
)
from .monitor import MonitorSLA
from .use_cases import (
    CriarTicketService,
    AtualizarTicketService,
    AtribuirTicketService,
    AlterarSolicitanteService,
    AlterarStatusService,
    ReabrirTicketService,
    CancelarTicketService,
    ObterTicketService,
    ListarTicketsService,
)

__all__ = [
    # Enums
    "TicketStatus",
    "TicketPriority",
    "CommentVisibility",
    # Entities
    "TicketEntity",
    "TicketAcaoEntity",
    "TicketComentarioEntity",
    "AnexoEntity",
    # Events
    "TicketAcaoRegistradaEvent",
    # Ports
    "TicketRepository",
    "TicketAcaoRepository",
    "ComentarioRepository",
    "AnexoRepository",
    "FileStorage",
    "NotificationDispatcher",
    # SLA
    "MonitorSLA",
    # Use Cases
    "CriarTicketService",
    "AtualizarTicketService",
    "AtribuirTicketService",
    "AlterarSolicitanteService",
    "AlterarStatusService",
    "ReabrirTicketService",
    "CancelarTicketService",
    "ObterTicketService",
    "ListarTicketsService",
]
