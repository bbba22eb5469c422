"""
Use Cases (Application Services) do Domínio de Tickets.

Este módulo contém os casos de uso do ciclo de vida do ticket, que
orquestram entidades, repositórios, auditoria e eventos.

Use Cases implementados:
- CriarTicketService: Cria novo ticket
- AtualizarTicketService: Atualização parcial (título, descrição, prioridade, categoria)
- AtribuirTicketService: Atribui ticket a um agent
- AlterarSolicitanteService: Troca o requester
- AlterarStatusService: Transições do fluxo principal
- ReabrirTicketService: Reabre ticket Resolvido/Fechado
- CancelarTicketService: Cancela ticket Novo/Em Análise
- ObterTicketService: Detalhes com comentários, anexos e histórico
- ListarTicketsService: Lista tickets com filtros e paginação

Responsabilidades dos Use Cases:
- Resolver o ator (`ator_id`) e checar papel/propriedade
- Coordenar entidades
- Gerenciar transações (via UoW): ticket + auditoria juntos
- Enfileirar eventos (notificação sai só após o commit)
- Retornar DTOs de saída
"""

from datetime import datetime
from typing import Dict, Optional
import logging

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    EntityNotFoundError,
    ForbiddenError,
    InvalidTransitionError,
    ValidationError,
)
from src.core.shared.relogio import Relogio, agora as relogio_padrao
from src.core.cadastros.entities import UsuarioEntity
from src.core.cadastros.ports import CategoriaRepository, UsuarioRepository
from src.core.cadastros.use_cases import resolver_ator

from .entities import (
    FLUXO_VALIDO,
    TicketAcaoEntity,
    TicketComentarioEntity,
    TicketEntity,
    TicketPriority,
    TicketStatus,
    CommentVisibility,
)
from .ports import (
    AnexoRepository,
    ComentarioRepository,
    FiltroTickets,
    TicketAcaoRepository,
    TicketRepository,
)
from .dtos import (
    AcaoOutputDTO,
    AlterarSolicitanteInputDTO,
    AlterarStatusInputDTO,
    AnexoOutputDTO,
    AtribuirTicketInputDTO,
    AtualizarTicketInputDTO,
    ComentarioOutputDTO,
    CriarTicketInputDTO,
    ListarTicketsQueryDTO,
    MotivoInputDTO,
    PaginatedResultDTO,
    TicketDetalheDTO,
    TicketListItemDTO,
    TicketOutputDTO,
)
from .events import TicketAcaoRegistradaEvent

logger = logging.getLogger(__name__)

PRIORIDADE_INVALIDA = "Prioridade inválida (Baixa, Média, Alta, Crítica)."


def parse_prioridade(valor: str) -> TicketPriority:
    try:
        return TicketPriority.from_string(valor)
    except ValueError:
        raise ValidationError(PRIORIDADE_INVALIDA, field="prioridade")


def ticket_nao_encontrado(ticket_id: str) -> EntityNotFoundError:
    return EntityNotFoundError(
        "Ticket não encontrado.",
        entity_type="Ticket",
        entity_id=ticket_id,
    )


class NomesResolver:
    """
    Resolve nomes de usuários e categorias para os DTOs de saída.

    Mantém cache por instância para evitar buscas repetidas
    numa mesma listagem.
    """

    def __init__(self, usuario_repo: UsuarioRepository, categoria_repo: CategoriaRepository):
        self.usuario_repo = usuario_repo
        self.categoria_repo = categoria_repo
        self._usuarios: Dict[str, Optional[str]] = {}
        self._categorias: Dict[str, Optional[str]] = {}

    def usuario(self, usuario_id: Optional[str]) -> Optional[str]:
        if not usuario_id:
            return None
        if usuario_id not in self._usuarios:
            usuario = self.usuario_repo.get_by_id(usuario_id)
            self._usuarios[usuario_id] = usuario.nome if usuario else None
        return self._usuarios[usuario_id]

    def categoria(self, categoria_id: Optional[str]) -> Optional[str]:
        if not categoria_id:
            return None
        if categoria_id not in self._categorias:
            categoria = self.categoria_repo.get_by_id(categoria_id)
            self._categorias[categoria_id] = categoria.nome if categoria else None
        return self._categorias[categoria_id]

    def ticket_output(self, ticket: TicketEntity, agora: datetime) -> TicketOutputDTO:
        return TicketOutputDTO.from_entity(
            ticket,
            agora,
            solicitante_nome=self.usuario(ticket.solicitante_id),
            responsavel_nome=self.usuario(ticket.responsavel_id),
            categoria_nome=self.categoria(ticket.categoria_id),
        )

    def ticket_list_item(self, ticket: TicketEntity) -> TicketListItemDTO:
        return TicketListItemDTO.from_entity(
            ticket,
            solicitante_nome=self.usuario(ticket.solicitante_id),
            responsavel_nome=self.usuario(ticket.responsavel_id),
            categoria_nome=self.categoria(ticket.categoria_id),
        )


class TicketLifecycleService:
    """
    Base dos use cases que alteram um ticket.

    Todos compartilham o mesmo fluxo:
    1. Resolver o ator
    2. Carregar o ticket travado para escrita
    3. Validar e mutar a entidade
    4. Persistir ticket + entrada de auditoria na mesma transação
    5. Enfileirar TicketAcaoRegistradaEvent (notificação pós-commit)

    Attributes:
        ticket_repo: Repositório de tickets
        acao_repo: Histórico de auditoria
        usuario_repo: Diretório de usuários
        categoria_repo: Diretório de categorias
        uow: Unit of Work para transações
        relogio: Fonte de "agora" (injetável nos testes)
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        acao_repo: TicketAcaoRepository,
        usuario_repo: UsuarioRepository,
        categoria_repo: CategoriaRepository,
        uow: UnitOfWork,
        relogio: Relogio = relogio_padrao,
    ):
        self.ticket_repo = ticket_repo
        self.acao_repo = acao_repo
        self.usuario_repo = usuario_repo
        self.categoria_repo = categoria_repo
        self.uow = uow
        self.relogio = relogio

    def _carregar(self, ticket_id: str) -> TicketEntity:
        ticket = self.ticket_repo.get_by_id(ticket_id, bloquear=True)
        if ticket is None:
            raise ticket_nao_encontrado(ticket_id)
        return ticket

    def _exigir_dono(self, ator: UsuarioEntity, ticket: TicketEntity, mensagem: str) -> None:
        if not ticket.is_dono(ator):
            raise ForbiddenError(mensagem, rule="somente_dono")

    def _registrar_acao(
        self,
        ticket: TicketEntity,
        descricao: str,
        agora: datetime,
        notificar: bool = True,
        email_extra: Optional[str] = None,
    ) -> TicketAcaoEntity:
        acao = TicketAcaoEntity.registrar(ticket.id, descricao, agora)
        self.acao_repo.add(acao)

        if notificar:
            self.uow.publish_event(
                TicketAcaoRegistradaEvent(
                    aggregate_id=ticket.id,
                    descricao=acao.descricao,
                    email_extra=email_extra,
                )
            )
        return acao

    def _output(self, ticket: TicketEntity, agora: datetime) -> TicketOutputDTO:
        return NomesResolver(self.usuario_repo, self.categoria_repo).ticket_output(ticket, agora)


class CriarTicketService(TicketLifecycleService):
    """
    Use Case: Criar um novo ticket.

    Fluxo:
    1. Ator deve ser Requester ou Manager
    2. Validar título, descrição, prioridade e categoria
    3. Criar entidade (status Novo, SLA a partir de agora)
    4. Persistir ticket + ação "Chamado criado por ..."

    Criação não gera notificação.

    Example:
        service = CriarTicketService(ticket_repo, acao_repo, usuario_repo, categoria_repo, uow)
        output = service.execute(CriarTicketInputDTO(
            ator_id=requester.id,
            titulo="Impressora offline",
            descricao="Não imprime desde ontem",
            prioridade="Alta",
            categoria_id=categoria.id,
        ))
    """

    def execute(self, input_dto: CriarTicketInputDTO) -> TicketOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            if not (ator.is_manager or ator.is_requester):
                raise ForbiddenError(
                    "Somente Requester ou Manager pode criar ticket.",
                    rule="criar_ticket",
                )

            titulo = TicketEntity.validar_titulo(input_dto.titulo)
            descricao = TicketEntity.validar_descricao(input_dto.descricao)
            prioridade = parse_prioridade(input_dto.prioridade)

            if not input_dto.categoria_id:
                raise ValidationError("Categoria é obrigatória.", field="categoria_id")
            if not self.categoria_repo.exists(input_dto.categoria_id):
                raise ValidationError(
                    f"Categoria #{input_dto.categoria_id} não encontrada.",
                    field="categoria_id",
                )

            agora = self.relogio()
            ticket = TicketEntity.criar(
                titulo=titulo,
                descricao=descricao,
                prioridade=prioridade,
                solicitante_id=ator.id,
                categoria_id=input_dto.categoria_id,
                agora=agora,
            )

            self.ticket_repo.save(ticket)
            self._registrar_acao(ticket, f"Chamado criado por {ator.nome}.", agora, notificar=False)

        logger.info(f"Ticket criado: {ticket.id} ({ticket.prioridade.value}) por {ator.id}")
        return self._output(ticket, agora)


class AtualizarTicketService(TicketLifecycleService):
    """
    Use Case: Atualização parcial de ticket.

    Cada campo é avaliado de forma independente; campo em branco
    conta como não informado e valor igual ao atual é ignorado.
    Cada campo alterado gera sua própria ação e notificação.

    Raises:
        ValidationError: Nenhum campo mudou, ou valor inválido
        BusinessRuleViolationError: Ticket Fechado/Cancelado
        ForbiddenError: Ator não é dono do ticket
    """

    def execute(self, input_dto: AtualizarTicketInputDTO) -> TicketOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            ticket = self._carregar(input_dto.ticket_id)

            ticket.exigir_ativo("Não é possível editar tickets não ativos.")
            self._exigir_dono(
                ator, ticket,
                "Somente o solicitante do ticket ou um Manager pode editar este ticket.",
            )

            agora = self.relogio()
            descricoes = []

            if input_dto.titulo and input_dto.titulo.strip():
                if ticket.alterar_titulo(input_dto.titulo):
                    descricoes.append(
                        f"Título do chamado alterado para: '{ticket.titulo}' - por {ator.nome}"
                    )

            if input_dto.descricao and input_dto.descricao.strip():
                if ticket.alterar_descricao(input_dto.descricao):
                    descricoes.append(
                        f"Descrição do chamado alterada para: '{ticket.descricao}' - por {ator.nome}"
                    )

            if input_dto.prioridade and input_dto.prioridade.strip():
                prioridade = parse_prioridade(input_dto.prioridade)
                if ticket.alterar_prioridade(prioridade, agora):
                    descricoes.append(
                        f"Prioridade alterada para {prioridade.value} por {ator.nome}"
                    )

            if input_dto.categoria_id:
                descricao = self._alterar_categoria(ticket, input_dto.categoria_id, ator)
                if descricao:
                    descricoes.append(descricao)

            if not descricoes:
                raise ValidationError("Nenhuma alteração detectada.")

            self.ticket_repo.save(ticket)
            for descricao in descricoes:
                self._registrar_acao(ticket, descricao, agora)

        logger.info(f"Ticket {ticket.id} atualizado ({len(descricoes)} campo(s)) por {ator.id}")
        return self._output(ticket, agora)

    def _alterar_categoria(
        self,
        ticket: TicketEntity,
        categoria_id: str,
        ator: UsuarioEntity,
    ) -> Optional[str]:
        nova = self.categoria_repo.get_by_id(categoria_id)
        if nova is None:
            raise ValidationError(
                f"Categoria #{categoria_id} não encontrada.",
                field="categoria_id",
            )

        antiga = (
            self.categoria_repo.get_by_id(ticket.categoria_id)
            if ticket.categoria_id else None
        )

        if not ticket.alterar_categoria(nova.id):
            return None

        if antiga is None:
            return f"Categoria definida como '{nova.nome}' por {ator.nome}."
        return f"Categoria '{antiga.nome}' foi trocada para '{nova.nome}' por {ator.nome}."


class AtribuirTicketService(TicketLifecycleService):
    """
    Use Case: Atribuir ticket a um agent.

    Fluxo:
    1. Buscar ticket (ativo) e checar dono
    2. Validar alvo (existe e é Agent)
    3. Atribuir (Novo avança para Em Análise)
    4. Ação + notificação incluindo o e-mail do agent
    """

    def execute(self, input_dto: AtribuirTicketInputDTO) -> TicketOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            ticket = self._carregar(input_dto.ticket_id)

            ticket.exigir_ativo("Não é possível atribuir tickets não ativos.")
            self._exigir_dono(
                ator, ticket,
                "Somente o solicitante do ticket ou um Manager pode atribuir "
                "este ticket a um agent.",
            )

            agente = self.usuario_repo.get_by_id(input_dto.agente_id)
            if agente is None:
                raise ValidationError("Usuário não encontrado.", field="agente_id")

            agora = self.relogio()
            ticket.atribuir_a(agente, agora)

            self.ticket_repo.save(ticket)
            self._registrar_acao(
                ticket,
                f"Chamado atribuído para agent {agente.nome} por {ator.nome}.",
                agora,
                email_extra=agente.email,
            )

        logger.info(f"Ticket {ticket.id} atribuído a {agente.id}")
        return self._output(ticket, agora)


class AlterarSolicitanteService(TicketLifecycleService):
    """Use Case: Trocar o requester do ticket."""

    def execute(self, input_dto: AlterarSolicitanteInputDTO) -> TicketOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            ticket = self._carregar(input_dto.ticket_id)

            ticket.exigir_ativo("Não é possível atribuir tickets não ativos.")
            self._exigir_dono(
                ator, ticket,
                "Somente o solicitante do ticket ou um Manager pode atribuir "
                "este ticket a outro responsável.",
            )

            solicitante = self.usuario_repo.get_by_id(input_dto.solicitante_id)
            if solicitante is None:
                raise ValidationError("Usuário não encontrado.", field="solicitante_id")

            ticket.alterar_solicitante(solicitante)

            agora = self.relogio()
            self.ticket_repo.save(ticket)
            self._registrar_acao(
                ticket,
                f"{ator.nome} mudou requester para {solicitante.nome}.",
                agora,
                email_extra=solicitante.email,
            )

        return self._output(ticket, agora)


class AlterarStatusService(TicketLifecycleService):
    """
    Use Case: Transição de status no fluxo principal.

    Em Análise -> Em Andamento -> Resolvido -> Fechado

    Quem executa cada aresta é validado pela entidade. Status
    desconhecido é tratado como transição inválida.
    """

    def execute(self, input_dto: AlterarStatusInputDTO) -> TicketOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            ticket = self._carregar(input_dto.ticket_id)

            try:
                novo_status = TicketStatus.from_string(input_dto.status)
            except ValueError:
                raise InvalidTransitionError(
                    ticket.status.value, input_dto.status, FLUXO_VALIDO
                )

            agora = self.relogio()
            anterior = ticket.alterar_status(novo_status, ator, agora)

            self.ticket_repo.save(ticket)
            self._registrar_acao(
                ticket,
                f"Status do Chamado atualizado de: '{anterior.value}' para: "
                f"'{novo_status.value}' por {ator.nome}.",
                agora,
            )

        logger.info(f"Ticket {ticket.id}: {anterior.value} -> {novo_status.value}")
        return self._output(ticket, agora)


class _MotivoService(TicketLifecycleService):
    """
    Base de reabrir/cancelar: ambos exigem dono, motivo obrigatório
    e gravam um comentário Interno com o motivo.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        acao_repo: TicketAcaoRepository,
        comentario_repo: ComentarioRepository,
        usuario_repo: UsuarioRepository,
        categoria_repo: CategoriaRepository,
        uow: UnitOfWork,
        relogio: Relogio = relogio_padrao,
    ):
        super().__init__(ticket_repo, acao_repo, usuario_repo, categoria_repo, uow, relogio)
        self.comentario_repo = comentario_repo

    def _registrar_motivo(
        self,
        ticket: TicketEntity,
        ator: UsuarioEntity,
        mensagem: str,
        agora: datetime,
    ) -> None:
        comentario = TicketComentarioEntity(
            ticket_id=ticket.id,
            autor_id=ator.id,
            visibilidade=CommentVisibility.INTERNO,
            mensagem=mensagem[:TicketComentarioEntity.MENSAGEM_MAX_LENGTH],
            criado_em=agora,
        )
        self.comentario_repo.save(comentario)


class ReabrirTicketService(_MotivoService):
    """
    Use Case: Reabrir ticket Resolvido/Fechado.

    Volta para Em Análise, limpa fechado_em e reinicia o SLA
    com a prioridade atual.
    """

    def execute(self, input_dto: MotivoInputDTO) -> TicketOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            ticket = self._carregar(input_dto.ticket_id)

            self._exigir_dono(
                ator, ticket,
                "Somente o solicitante do ticket ou um Manager pode reabrí-lo.",
            )

            agora = self.relogio()
            motivo = ticket.reabrir(input_dto.motivo, agora)

            self.ticket_repo.save(ticket)
            self._registrar_motivo(ticket, ator, f"Chamado reaberto: {motivo}", agora)
            self._registrar_acao(ticket, f"Chamado reaberto por {ator.nome}.", agora)

        logger.info(f"Ticket {ticket.id} reaberto por {ator.id}")
        return self._output(ticket, agora)


class CancelarTicketService(_MotivoService):
    """Use Case: Cancelar ticket Novo/Em Análise."""

    def execute(self, input_dto: MotivoInputDTO) -> TicketOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            ticket = self._carregar(input_dto.ticket_id)

            self._exigir_dono(
                ator, ticket,
                "Somente o solicitante do ticket ou um Manager pode cancelá-lo.",
            )

            agora = self.relogio()
            motivo = ticket.cancelar(input_dto.motivo, agora)

            self.ticket_repo.save(ticket)
            self._registrar_motivo(ticket, ator, f"Chamado cancelado: {motivo}", agora)
            self._registrar_acao(ticket, f"Chamado cancelado por {ator.nome}.", agora)

        logger.info(f"Ticket {ticket.id} cancelado por {ator.id}")
        return self._output(ticket, agora)


# =============================================================================
# Consultas (sem UoW: leitura não precisa de transação)
# =============================================================================

class ObterTicketService:
    """
    Use Case: Obter detalhes de um ticket específico.

    Comentários Internos só aparecem para participantes.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        acao_repo: TicketAcaoRepository,
        comentario_repo: ComentarioRepository,
        anexo_repo: AnexoRepository,
        usuario_repo: UsuarioRepository,
        categoria_repo: CategoriaRepository,
        relogio: Relogio = relogio_padrao,
    ):
        self.ticket_repo = ticket_repo
        self.acao_repo = acao_repo
        self.comentario_repo = comentario_repo
        self.anexo_repo = anexo_repo
        self.usuario_repo = usuario_repo
        self.categoria_repo = categoria_repo
        self.relogio = relogio

    def execute(self, ticket_id: str, ator_id: str) -> TicketDetalheDTO:
        """
        Raises:
            UnauthorizedError: Ator não informado ou inexistente
            EntityNotFoundError: Se ticket não existe
        """
        ator = resolver_ator(self.usuario_repo, ator_id)

        ticket = self.ticket_repo.get_by_id(ticket_id)
        if ticket is None:
            raise ticket_nao_encontrado(ticket_id)

        nomes = NomesResolver(self.usuario_repo, self.categoria_repo)

        comentarios = [
            ComentarioOutputDTO.from_entity(c, nomes.usuario(c.autor_id))
            for c in self.comentario_repo.list_by_ticket(ticket.id)
            if ticket.pode_ver(c, ator)
        ]

        return TicketDetalheDTO(
            ticket=nomes.ticket_output(ticket, self.relogio()),
            comentarios=comentarios,
            anexos=[AnexoOutputDTO.from_entity(a) for a in self.anexo_repo.list_by_ticket(ticket.id)],
            acoes=[AcaoOutputDTO.from_entity(a) for a in self.acao_repo.list_by_ticket(ticket.id)],
        )


class ListarTicketsService:
    """
    Use Case: Listar tickets com filtros e paginação.

    Sem status explícito, Cancelados ficam de fora. Ordenação por
    data de criação, mais recentes primeiro.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        usuario_repo: UsuarioRepository,
        categoria_repo: CategoriaRepository,
        relogio: Relogio = relogio_padrao,
    ):
        self.ticket_repo = ticket_repo
        self.usuario_repo = usuario_repo
        self.categoria_repo = categoria_repo
        self.relogio = relogio

    def execute(self, query: ListarTicketsQueryDTO) -> PaginatedResultDTO:
        """
        Raises:
            ValidationError: Status ou prioridade inválidos
        """
        status = None
        if query.status and query.status.strip():
            try:
                status = TicketStatus.from_string(query.status)
            except ValueError:
                raise ValidationError(f"Status inválido: '{query.status}'.", field="status")

        prioridade = None
        if query.prioridade and query.prioridade.strip():
            prioridade = parse_prioridade(query.prioridade)

        pagina = query.pagina if query.pagina >= 1 else 1
        por_pagina = query.por_pagina if query.por_pagina >= 1 else 20

        filtro = FiltroTickets(
            status=status,
            prioridade=prioridade,
            titulo=(query.titulo or "").strip() or None,
            criado_de=query.criado_de,
            criado_ate=query.criado_ate,
            solicitante_id=query.solicitante_id,
            responsavel_id=query.responsavel_id,
            categoria_id=query.categoria_id,
            prazo_de=query.prazo_de,
            prazo_ate=query.prazo_ate,
            atrasados_em=self.relogio() if query.apenas_atrasados else None,
        )

        tickets, total = self.ticket_repo.list_paginated(filtro, pagina, por_pagina)
        nomes = NomesResolver(self.usuario_repo, self.categoria_repo)

        return PaginatedResultDTO(
            items=[nomes.ticket_list_item(t) for t in tickets],
            total=total,
            pagina=pagina,
            por_pagina=por_pagina,
        )
