"""
Ports (Interfaces) do Domínio de Tickets.

Define os contratos que os Adapters de infraestrutura devem implementar
para persistência, armazenamento de arquivos e notificações.

Tipos de Ports:
- TicketRepository: persistência do agregado Ticket
- TicketAcaoRepository: histórico de auditoria (somente inclusão)
- ComentarioRepository / AnexoRepository: filhos do ticket
- FileStorage: armazenamento de arquivos anexados
- NotificationDispatcher: envio de notificações

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core

As implementações em memória no fim do módulo servem aos testes
unitários e seguem a mesma semântica de versão das implementações
Django: `save` de um ticket com `versao` desatualizada falha.
"""

from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable

from src.core.shared.exceptions import ConcurrencyError

from .entities import (
    AnexoEntity,
    TicketAcaoEntity,
    TicketComentarioEntity,
    TicketEntity,
    TicketPriority,
    TicketStatus,
)


@dataclass(frozen=True)
class FiltroTickets:
    """
    Critérios já validados de uma listagem de tickets.

    `status` None exclui Cancelados; `atrasados_em` preenchido
    restringe a tickets ativos com prazo anterior a esse instante.
    """

    status: Optional[TicketStatus] = None
    prioridade: Optional[TicketPriority] = None
    titulo: Optional[str] = None
    criado_de: Optional[datetime] = None
    criado_ate: Optional[datetime] = None
    solicitante_id: Optional[str] = None
    responsavel_id: Optional[str] = None
    categoria_id: Optional[str] = None
    prazo_de: Optional[datetime] = None
    prazo_ate: Optional[datetime] = None
    atrasados_em: Optional[datetime] = None

    def aceita(self, ticket: TicketEntity) -> bool:
        """Avalia os critérios em memória (usado pelo repositório em memória)."""
        if self.status is not None:
            if ticket.status != self.status:
                return False
        elif ticket.status == TicketStatus.CANCELADO:
            return False

        if self.prioridade is not None and ticket.prioridade != self.prioridade:
            return False
        if self.titulo and self.titulo.lower() not in ticket.titulo.lower():
            return False
        if self.criado_de and ticket.criado_em < self.criado_de:
            return False
        if self.criado_ate and ticket.criado_em > self.criado_ate:
            return False
        if self.solicitante_id and ticket.solicitante_id != self.solicitante_id:
            return False
        if self.responsavel_id and ticket.responsavel_id != self.responsavel_id:
            return False
        if self.categoria_id and ticket.categoria_id != self.categoria_id:
            return False
        if self.prazo_de and (ticket.sla_prazo is None or ticket.sla_prazo < self.prazo_de):
            return False
        if self.prazo_ate and (ticket.sla_prazo is None or ticket.sla_prazo > self.prazo_ate):
            return False
        if self.atrasados_em and not ticket.esta_atrasado_em(self.atrasados_em):
            return False
        return True


@runtime_checkable
class TicketRepository(Protocol):
    """
    Interface para persistência de Tickets.

    Implementações:
    - DjangoTicketRepository (PostgreSQL via ORM)
    - InMemoryTicketRepository (para testes)

    Também atende a TicketsAtivosQuery, usada pelos cadastros
    para bloquear exclusões.
    """

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste ticket (create se versao == 0, senão update).

        Atualiza `ticket.versao` com a versão gravada.

        Raises:
            ConcurrencyError: Se a versão gravada mudou desde a leitura
        """
        ...

    def get_by_id(self, ticket_id: str, bloquear: bool = False) -> Optional[TicketEntity]:
        """
        Busca ticket por ID.

        Args:
            ticket_id: Identificador do ticket
            bloquear: Trava a linha até o fim da transação corrente
                (só faz sentido dentro de um UnitOfWork)
        """
        ...

    def exists(self, ticket_id: str) -> bool:
        ...

    def list_paginated(
        self,
        filtro: FiltroTickets,
        pagina: int,
        por_pagina: int,
    ) -> Tuple[List[TicketEntity], int]:
        """Página de tickets (mais recentes primeiro) e total sem paginação."""
        ...

    def list_monitorados_sla(self, agora: datetime) -> List[TicketEntity]:
        """Tickets ativos com prazo de SLA definido e ainda no futuro."""
        ...

    def exists_ativo_por_categoria(self, categoria_id: str) -> bool:
        ...

    def exists_ativo_como_solicitante(self, usuario_id: str) -> bool:
        ...

    def exists_ativo_como_responsavel(self, usuario_id: str) -> bool:
        ...


class TicketAcaoRepository(Protocol):
    """Audit Sink: histórico imutável, só aceita inclusões."""

    def add(self, acao: TicketAcaoEntity) -> None:
        ...

    def list_by_ticket(self, ticket_id: str) -> List[TicketAcaoEntity]:
        """Ações do ticket, mais recentes primeiro."""
        ...


class ComentarioRepository(Protocol):
    def save(self, comentario: TicketComentarioEntity) -> None:
        ...

    def get_by_id(self, ticket_id: str, comentario_id: str) -> Optional[TicketComentarioEntity]:
        ...

    def delete(self, comentario_id: str) -> None:
        ...

    def list_by_ticket(self, ticket_id: str) -> List[TicketComentarioEntity]:
        """Comentários do ticket, mais recentes primeiro."""
        ...


class AnexoRepository(Protocol):
    def save(self, anexo: AnexoEntity) -> None:
        ...

    def get_by_id(self, ticket_id: str, anexo_id: str) -> Optional[AnexoEntity]:
        ...

    def delete(self, anexo_id: str) -> None:
        ...

    def list_by_ticket(self, ticket_id: str) -> List[AnexoEntity]:
        ...


class FileStorage(Protocol):
    """Armazenamento de arquivos (blob)."""

    def save(self, key: str, conteudo: bytes, content_type: str) -> str:
        """Grava o arquivo e retorna a URL pública."""
        ...

    def delete(self, key: str) -> None:
        ...


class NotificationDispatcher(Protocol):
    """
    Envio de notificações sobre tickets.

    Falhas de envio são levantadas ao chamador, que decide se
    registra em log (monitor de SLA) ou agenda nova tentativa
    (handler Celery).
    """

    def notificar_acao(
        self,
        ticket_id: str,
        descricao: str,
        email_extra: Optional[str] = None,
    ) -> None:
        ...

    def notificar_alerta_sla(self, ticket: TicketEntity) -> None:
        ...


# =============================================================================
# Implementações em memória
# =============================================================================

class InMemoryTicketRepository:
    """
    Implementação em memória do TicketRepository.

    Útil para:
    - Testes unitários
    - Prototipagem

    Não usar em produção!

    Example:
        repo = InMemoryTicketRepository()
        repo.save(ticket)
        found = repo.get_by_id(ticket.id)
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}

    def save(self, ticket: TicketEntity) -> None:
        atual = self._tickets.get(ticket.id)
        if ticket.versao == 0:
            if atual is not None:
                raise ConcurrencyError("Ticket já existe.")
        elif atual is None or atual.versao != ticket.versao:
            raise ConcurrencyError(
                "O ticket foi alterado por outra operação. Tente novamente."
            )
        ticket.versao += 1
        self._tickets[ticket.id] = deepcopy(ticket)

    def get_by_id(self, ticket_id: str, bloquear: bool = False) -> Optional[TicketEntity]:
        ticket = self._tickets.get(ticket_id)
        return deepcopy(ticket) if ticket else None

    def exists(self, ticket_id: str) -> bool:
        return ticket_id in self._tickets

    def list_paginated(
        self,
        filtro: FiltroTickets,
        pagina: int,
        por_pagina: int,
    ) -> Tuple[List[TicketEntity], int]:
        tickets = [t for t in self._tickets.values() if filtro.aceita(t)]
        tickets.sort(key=lambda t: t.criado_em, reverse=True)
        inicio = (pagina - 1) * por_pagina
        pagina_atual = tickets[inicio:inicio + por_pagina]
        return [deepcopy(t) for t in pagina_atual], len(tickets)

    def list_monitorados_sla(self, agora: datetime) -> List[TicketEntity]:
        return [
            deepcopy(t) for t in self._tickets.values()
            if t.esta_ativo and t.sla_prazo is not None and t.sla_prazo > agora
        ]

    def exists_ativo_por_categoria(self, categoria_id: str) -> bool:
        return any(
            t.esta_ativo and t.categoria_id == categoria_id
            for t in self._tickets.values()
        )

    def exists_ativo_como_solicitante(self, usuario_id: str) -> bool:
        return any(
            t.esta_ativo and t.solicitante_id == usuario_id
            for t in self._tickets.values()
        )

    def exists_ativo_como_responsavel(self, usuario_id: str) -> bool:
        return any(
            t.esta_ativo and t.responsavel_id == usuario_id
            for t in self._tickets.values()
        )

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._tickets.clear()


class InMemoryTicketAcaoRepository:
    def __init__(self):
        self._acoes: List[TicketAcaoEntity] = []

    def add(self, acao: TicketAcaoEntity) -> None:
        self._acoes.append(acao)

    def list_by_ticket(self, ticket_id: str) -> List[TicketAcaoEntity]:
        acoes = [a for a in self._acoes if a.ticket_id == ticket_id]
        return list(reversed(acoes))


class InMemoryComentarioRepository:
    def __init__(self):
        self._comentarios: Dict[str, TicketComentarioEntity] = {}

    def save(self, comentario: TicketComentarioEntity) -> None:
        self._comentarios[comentario.id] = deepcopy(comentario)

    def get_by_id(self, ticket_id: str, comentario_id: str) -> Optional[TicketComentarioEntity]:
        comentario = self._comentarios.get(comentario_id)
        if comentario is None or comentario.ticket_id != ticket_id:
            return None
        return deepcopy(comentario)

    def delete(self, comentario_id: str) -> None:
        self._comentarios.pop(comentario_id, None)

    def list_by_ticket(self, ticket_id: str) -> List[TicketComentarioEntity]:
        comentarios = [c for c in self._comentarios.values() if c.ticket_id == ticket_id]
        comentarios.sort(key=lambda c: c.criado_em, reverse=True)
        return [deepcopy(c) for c in comentarios]


class InMemoryAnexoRepository:
    def __init__(self):
        self._anexos: Dict[str, AnexoEntity] = {}

    def save(self, anexo: AnexoEntity) -> None:
        self._anexos[anexo.id] = deepcopy(anexo)

    def get_by_id(self, ticket_id: str, anexo_id: str) -> Optional[AnexoEntity]:
        anexo = self._anexos.get(anexo_id)
        if anexo is None or anexo.ticket_id != ticket_id:
            return None
        return deepcopy(anexo)

    def delete(self, anexo_id: str) -> None:
        self._anexos.pop(anexo_id, None)

    def list_by_ticket(self, ticket_id: str) -> List[AnexoEntity]:
        anexos = [a for a in self._anexos.values() if a.ticket_id == ticket_id]
        anexos.sort(key=lambda a: a.enviado_em)
        return [deepcopy(a) for a in anexos]


class InMemoryFileStorage:
    """Guarda arquivos em um dict; a URL é `memory://{key}`."""

    def __init__(self):
        self.arquivos: Dict[str, bytes] = {}

    def save(self, key: str, conteudo: bytes, content_type: str) -> str:
        self.arquivos[key] = conteudo
        return f"memory://{key}"

    def delete(self, key: str) -> None:
        self.arquivos.pop(key, None)


class InMemoryNotificationDispatcher:
    """Registra as notificações pedidas, sem enviar nada."""

    def __init__(self):
        self.acoes: List[Tuple[str, str, Optional[str]]] = []
        self.alertas: List[str] = []

    def notificar_acao(
        self,
        ticket_id: str,
        descricao: str,
        email_extra: Optional[str] = None,
    ) -> None:
        self.acoes.append((ticket_id, descricao, email_extra))

    def notificar_alerta_sla(self, ticket: TicketEntity) -> None:
        self.alertas.append(ticket.id)
