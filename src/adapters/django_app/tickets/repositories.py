"""
Repositórios Django para persistência de Tickets e Cadastros.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- Implementar os Protocols de src/core/*/ports.py
- Mapear entities para models e vice-versa
- Executar queries no banco via ORM

Concorrência:
    DjangoTicketRepository.save faz UPDATE condicional na coluna
    `versao`. Se outra transação gravou o ticket depois da leitura,
    nenhuma linha é afetada e ConcurrencyError é levantado.
    Dentro do UnitOfWork, `get_by_id(..., bloquear=True)` usa
    SELECT ... FOR UPDATE para serializar escritas no mesmo ticket.
"""

from datetime import datetime
from typing import List, Optional, Tuple
import logging

from django.db.models import F

from src.core.cadastros.entities import CategoriaEntity, UserRole, UsuarioEntity
from src.core.cadastros.ports import (
    CategoriaRepository as CategoriaRepositoryPort,
    UsuarioRepository as UsuarioRepositoryPort,
)
from src.core.tickets.entities import (
    AnexoEntity,
    TicketAcaoEntity,
    TicketComentarioEntity,
    TicketEntity,
)
from src.core.tickets.ports import (
    FiltroTickets,
    TicketRepository as TicketRepositoryPort,
)
from src.core.shared.exceptions import ConcurrencyError

from .models import (
    STATUS_INATIVOS,
    AnexoModel,
    CategoriaModel,
    TicketAcaoModel,
    TicketComentarioModel,
    TicketModel,
    TicketStatusChoices,
    UsuarioModel,
)
from .mappers import (
    AnexoMapper,
    CategoriaMapper,
    ComentarioMapper,
    TicketAcaoMapper,
    TicketMapper,
    UsuarioMapper,
)

logger = logging.getLogger(__name__)


class DjangoTicketRepository(TicketRepositoryPort):
    """
    Implementação Django do TicketRepository.

    Example:
        repo = DjangoTicketRepository()

        with uow:
            ticket = repo.get_by_id("uuid-here", bloquear=True)
            ticket.alterar_prioridade(TicketPriority.ALTA, agora)
            repo.save(ticket)
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste ticket.

        versao == 0 → INSERT com versao 1.
        versao > 0  → UPDATE ... WHERE id = ? AND versao = ?

        Raises:
            ConcurrencyError: Se a linha mudou desde a leitura
        """
        if ticket.versao == 0:
            self._mapper.to_model(ticket).save(force_insert=True)
            ticket.versao = 1
            logger.debug(f"Ticket inserido: {ticket.id}")
            return

        atualizados = TicketModel.objects.filter(
            id=ticket.id,
            versao=ticket.versao,
        ).update(
            versao=F('versao') + 1,
            **self._mapper.campos_update(ticket),
        )

        if atualizados == 0:
            logger.warning(f"Conflito de versão no ticket {ticket.id} (versao={ticket.versao})")
            raise ConcurrencyError(
                "O ticket foi alterado por outra operação. Tente novamente."
            )

        ticket.versao += 1
        logger.debug(f"Ticket atualizado: {ticket.id} (versao={ticket.versao})")

    def get_by_id(self, ticket_id: str, bloquear: bool = False) -> Optional[TicketEntity]:
        queryset = TicketModel.objects.all()
        if bloquear:
            queryset = queryset.select_for_update()

        try:
            model = queryset.get(id=ticket_id)
        except TicketModel.DoesNotExist:
            logger.debug(f"Ticket not found: {ticket_id}")
            return None
        return self._mapper.to_entity(model)

    def exists(self, ticket_id: str) -> bool:
        return TicketModel.objects.filter(id=ticket_id).exists()

    def list_paginated(
        self,
        filtro: FiltroTickets,
        pagina: int,
        por_pagina: int,
    ) -> Tuple[List[TicketEntity], int]:
        queryset = self._aplicar_filtro(TicketModel.objects.all(), filtro)

        total = queryset.count()
        inicio = (pagina - 1) * por_pagina
        models = queryset.order_by('-criado_em')[inicio:inicio + por_pagina]

        return self._mapper.to_entity_list(models), total

    def _aplicar_filtro(self, queryset, filtro: FiltroTickets):
        if filtro.status is not None:
            queryset = queryset.filter(status=filtro.status.value)
        else:
            queryset = queryset.exclude(status=TicketStatusChoices.CANCELADO)

        if filtro.prioridade is not None:
            queryset = queryset.filter(prioridade=filtro.prioridade.value)
        if filtro.titulo:
            queryset = queryset.filter(titulo__icontains=filtro.titulo)
        if filtro.criado_de:
            queryset = queryset.filter(criado_em__gte=filtro.criado_de)
        if filtro.criado_ate:
            queryset = queryset.filter(criado_em__lte=filtro.criado_ate)
        if filtro.solicitante_id:
            queryset = queryset.filter(solicitante_id=filtro.solicitante_id)
        if filtro.responsavel_id:
            queryset = queryset.filter(responsavel_id=filtro.responsavel_id)
        if filtro.categoria_id:
            queryset = queryset.filter(categoria_id=filtro.categoria_id)
        if filtro.prazo_de:
            queryset = queryset.filter(sla_prazo__isnull=False, sla_prazo__gte=filtro.prazo_de)
        if filtro.prazo_ate:
            queryset = queryset.filter(sla_prazo__isnull=False, sla_prazo__lte=filtro.prazo_ate)
        if filtro.atrasados_em:
            queryset = queryset.filter(
                sla_prazo__isnull=False,
                sla_prazo__lt=filtro.atrasados_em,
            ).exclude(status__in=STATUS_INATIVOS)

        return queryset

    def list_monitorados_sla(self, agora: datetime) -> List[TicketEntity]:
        models = TicketModel.objects.filter(
            sla_prazo__isnull=False,
            sla_prazo__gt=agora,
        ).exclude(status__in=STATUS_INATIVOS)
        return self._mapper.to_entity_list(models)

    def _ativos(self):
        return TicketModel.objects.exclude(status__in=STATUS_INATIVOS)

    def exists_ativo_por_categoria(self, categoria_id: str) -> bool:
        return self._ativos().filter(categoria_id=categoria_id).exists()

    def exists_ativo_como_solicitante(self, usuario_id: str) -> bool:
        return self._ativos().filter(solicitante_id=usuario_id).exists()

    def exists_ativo_como_responsavel(self, usuario_id: str) -> bool:
        return self._ativos().filter(responsavel_id=usuario_id).exists()


class DjangoTicketAcaoRepository:
    """Histórico de auditoria: só inclusões."""

    def add(self, acao: TicketAcaoEntity) -> None:
        TicketAcaoMapper.to_model(acao).save(force_insert=True)

    def list_by_ticket(self, ticket_id: str) -> List[TicketAcaoEntity]:
        models = TicketAcaoModel.objects.filter(ticket_id=ticket_id).order_by('-criado_em', '-id')
        return [TicketAcaoMapper.to_entity(m) for m in models]


class DjangoComentarioRepository:
    def save(self, comentario: TicketComentarioEntity) -> None:
        model = ComentarioMapper.to_model(comentario)
        TicketComentarioModel.objects.update_or_create(
            id=model.id,
            defaults={
                'ticket_id': model.ticket_id,
                'autor_id': model.autor_id,
                'visibilidade': model.visibilidade,
                'mensagem': model.mensagem,
                'criado_em': model.criado_em,
            },
        )

    def get_by_id(self, ticket_id: str, comentario_id: str) -> Optional[TicketComentarioEntity]:
        model = TicketComentarioModel.objects.filter(ticket_id=ticket_id, id=comentario_id).first()
        return ComentarioMapper.to_entity(model) if model else None

    def delete(self, comentario_id: str) -> None:
        TicketComentarioModel.objects.filter(id=comentario_id).delete()

    def list_by_ticket(self, ticket_id: str) -> List[TicketComentarioEntity]:
        models = TicketComentarioModel.objects.filter(ticket_id=ticket_id).order_by('-criado_em')
        return [ComentarioMapper.to_entity(m) for m in models]


class DjangoAnexoRepository:
    def save(self, anexo: AnexoEntity) -> None:
        AnexoMapper.to_model(anexo).save()

    def get_by_id(self, ticket_id: str, anexo_id: str) -> Optional[AnexoEntity]:
        model = AnexoModel.objects.filter(ticket_id=ticket_id, id=anexo_id).first()
        return AnexoMapper.to_entity(model) if model else None

    def delete(self, anexo_id: str) -> None:
        AnexoModel.objects.filter(id=anexo_id).delete()

    def list_by_ticket(self, ticket_id: str) -> List[AnexoEntity]:
        models = AnexoModel.objects.filter(ticket_id=ticket_id).order_by('enviado_em')
        return [AnexoMapper.to_entity(m) for m in models]


class DjangoUsuarioRepository(UsuarioRepositoryPort):
    """
    Diretório de usuários em banco.

    Excluir um usuário anula (SET_NULL) as referências em tickets,
    comentários e anexos.
    """

    def save(self, usuario: UsuarioEntity) -> None:
        UsuarioModel.objects.update_or_create(
            id=usuario.id,
            defaults={
                'nome': usuario.nome,
                'email': usuario.email,
                'papel': usuario.papel.value,
            },
        )

    def get_by_id(self, usuario_id: str) -> Optional[UsuarioEntity]:
        model = UsuarioModel.objects.filter(id=usuario_id).first()
        return UsuarioMapper.to_entity(model) if model else None

    def get_by_email(self, email: str) -> Optional[UsuarioEntity]:
        model = UsuarioModel.objects.filter(email__iexact=(email or "").strip()).first()
        return UsuarioMapper.to_entity(model) if model else None

    def delete(self, usuario_id: str) -> None:
        UsuarioModel.objects.filter(id=usuario_id).delete()
        logger.info(f"Usuário removido do banco: {usuario_id}")

    def list(self, papel: Optional[UserRole] = None) -> List[UsuarioEntity]:
        queryset = UsuarioModel.objects.order_by('nome')
        if papel:
            queryset = queryset.filter(papel=papel.value)
        return [UsuarioMapper.to_entity(m) for m in queryset]


class DjangoCategoriaRepository(CategoriaRepositoryPort):
    """Diretório de categorias em banco."""

    def save(self, categoria: CategoriaEntity) -> None:
        CategoriaModel.objects.update_or_create(
            id=categoria.id,
            defaults={
                'nome': categoria.nome,
                'parent_id': categoria.parent_id,
            },
        )

    def get_by_id(self, categoria_id: str) -> Optional[CategoriaEntity]:
        model = CategoriaModel.objects.filter(id=categoria_id).first()
        return CategoriaMapper.to_entity(model) if model else None

    def exists(self, categoria_id: str) -> bool:
        return CategoriaModel.objects.filter(id=categoria_id).exists()

    def get_by_nome(self, nome: str) -> Optional[CategoriaEntity]:
        model = CategoriaModel.objects.filter(nome__iexact=(nome or "").strip()).first()
        return CategoriaMapper.to_entity(model) if model else None

    def has_children(self, categoria_id: str) -> bool:
        return CategoriaModel.objects.filter(parent_id=categoria_id).exists()

    def delete(self, categoria_id: str) -> None:
        CategoriaModel.objects.filter(id=categoria_id).delete()
        logger.info(f"Categoria removida do banco: {categoria_id}")

    def list(
        self,
        nome: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> List[CategoriaEntity]:
        queryset = CategoriaModel.objects.order_by('nome')
        if nome:
            queryset = queryset.filter(nome__icontains=nome)
        if parent_id:
            queryset = queryset.filter(parent_id=parent_id)
        return [CategoriaMapper.to_entity(m) for m in queryset]
