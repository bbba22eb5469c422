"""
Use Cases de Comentários.

Regras de visibilidade:
- Público: qualquer usuário válido vê e cria
- Interno: só participantes (Manager, solicitante, responsável)

Em tickets Fechados/Cancelados nenhum comentário é criado,
editado ou excluído. Edição e exclusão são exclusivas do autor.
"""

from typing import List
import logging

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    EntityNotFoundError,
    ForbiddenError,
    ValidationError,
)
from src.core.shared.relogio import Relogio, agora as relogio_padrao
from src.core.cadastros.ports import UsuarioRepository
from src.core.cadastros.use_cases import resolver_ator

from .entities import CommentVisibility, TicketComentarioEntity, TicketEntity
from .ports import ComentarioRepository, TicketRepository
from .dtos import ComentarioOutputDTO, CriarComentarioInputDTO, EditarComentarioInputDTO
from .use_cases import ticket_nao_encontrado

logger = logging.getLogger(__name__)


def _comentario_nao_encontrado(comentario_id: str) -> EntityNotFoundError:
    return EntityNotFoundError(
        "Comentário não encontrado.",
        entity_type="Comentario",
        entity_id=comentario_id,
    )


class _ComentarioService:
    def __init__(
        self,
        ticket_repo: TicketRepository,
        comentario_repo: ComentarioRepository,
        usuario_repo: UsuarioRepository,
        uow: UnitOfWork,
        relogio: Relogio = relogio_padrao,
    ):
        self.ticket_repo = ticket_repo
        self.comentario_repo = comentario_repo
        self.usuario_repo = usuario_repo
        self.uow = uow
        self.relogio = relogio

    def _carregar_ticket(self, ticket_id: str) -> TicketEntity:
        ticket = self.ticket_repo.get_by_id(ticket_id, bloquear=True)
        if ticket is None:
            raise ticket_nao_encontrado(ticket_id)
        return ticket

    def _carregar_do_autor(
        self,
        ticket_id: str,
        comentario_id: str,
        ator_id: str,
        mensagem_proibido: str,
    ) -> TicketComentarioEntity:
        comentario = self.comentario_repo.get_by_id(ticket_id, comentario_id)
        if comentario is None:
            raise _comentario_nao_encontrado(comentario_id)
        if comentario.autor_id != ator_id:
            raise ForbiddenError(mensagem_proibido, rule="somente_autor")
        return comentario


class CriarComentarioService(_ComentarioService):
    """
    Use Case: Comentar em um ticket.

    Raises:
        BusinessRuleViolationError: Ticket Fechado/Cancelado
        ValidationError: Mensagem ou visibilidade inválidas
        ForbiddenError: Comentário Interno por não participante
    """

    def execute(self, input_dto: CriarComentarioInputDTO) -> ComentarioOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            ticket = self._carregar_ticket(input_dto.ticket_id)

            ticket.exigir_ativo("Não é possível comentar em tickets não ativos.")

            mensagem = TicketComentarioEntity.validar_mensagem(input_dto.mensagem)

            try:
                visibilidade = CommentVisibility.from_string(input_dto.visibilidade)
            except ValueError:
                raise ValidationError(
                    "Visibilidade inválida. Use 'Público' ou 'Interno'.",
                    field="visibilidade",
                )

            if visibilidade == CommentVisibility.INTERNO and not ticket.is_participante(ator):
                raise ForbiddenError(
                    "Somente requester e assignee do ticket em questão ou manager "
                    "podem criar comentários internos.",
                    rule="comentario_interno_participante",
                )

            comentario = TicketComentarioEntity.criar(
                ticket_id=ticket.id,
                autor_id=ator.id,
                mensagem=mensagem,
                visibilidade=visibilidade,
                agora=self.relogio(),
            )
            self.comentario_repo.save(comentario)

        logger.info(f"Comentário {comentario.id} ({visibilidade.value}) no ticket {ticket.id}")
        return ComentarioOutputDTO.from_entity(comentario, ator.nome)


class EditarComentarioService(_ComentarioService):
    """Use Case: Substituir a mensagem de um comentário (somente o autor)."""

    def execute(self, input_dto: EditarComentarioInputDTO) -> ComentarioOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            ticket = self._carregar_ticket(input_dto.ticket_id)

            ticket.exigir_ativo("Não é possível editar comentários em tickets não ativos.")
            TicketComentarioEntity.validar_mensagem(input_dto.mensagem)

            comentario = self._carregar_do_autor(
                ticket.id,
                input_dto.comentario_id,
                ator.id,
                "Não é possível editar comentários de outras pessoas!",
            )

            comentario.editar(input_dto.mensagem, self.relogio())
            self.comentario_repo.save(comentario)

        return ComentarioOutputDTO.from_entity(comentario, ator.nome)


class ExcluirComentarioService(_ComentarioService):
    """Use Case: Excluir comentário (somente o autor)."""

    def execute(self, ator_id: str, ticket_id: str, comentario_id: str) -> None:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, ator_id)
            ticket = self._carregar_ticket(ticket_id)

            ticket.exigir_ativo("Não é possível excluir comentários em tickets não ativos.")

            comentario = self._carregar_do_autor(
                ticket.id,
                comentario_id,
                ator.id,
                "Não é possível excluir comentários de outras pessoas!",
            )
            self.comentario_repo.delete(comentario.id)

        logger.info(f"Comentário {comentario_id} excluído do ticket {ticket_id}")


class ListarComentariosService:
    """
    Use Case: Listar comentários de um ticket, mais recentes primeiro.

    Não participantes recebem apenas os Públicos.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        comentario_repo: ComentarioRepository,
        usuario_repo: UsuarioRepository,
    ):
        self.ticket_repo = ticket_repo
        self.comentario_repo = comentario_repo
        self.usuario_repo = usuario_repo

    def _visiveis(self, ator_id: str, ticket_id: str) -> List[ComentarioOutputDTO]:
        ator = resolver_ator(self.usuario_repo, ator_id)

        ticket = self.ticket_repo.get_by_id(ticket_id)
        if ticket is None:
            raise ticket_nao_encontrado(ticket_id)

        resultado = []
        autores = {}
        for comentario in self.comentario_repo.list_by_ticket(ticket.id):
            if not ticket.pode_ver(comentario, ator):
                continue
            if comentario.autor_id and comentario.autor_id not in autores:
                autor = self.usuario_repo.get_by_id(comentario.autor_id)
                autores[comentario.autor_id] = autor.nome if autor else None
            resultado.append(
                ComentarioOutputDTO.from_entity(comentario, autores.get(comentario.autor_id))
            )
        return resultado

    def execute(self, ator_id: str, ticket_id: str) -> List[ComentarioOutputDTO]:
        return self._visiveis(ator_id, ticket_id)


class ObterComentarioService(ListarComentariosService):
    """
    Use Case: Obter um comentário.

    Comentário Interno pedido por não participante é tratado
    como inexistente.
    """

    def execute(self, ator_id: str, ticket_id: str, comentario_id: str) -> ComentarioOutputDTO:
        for comentario in self._visiveis(ator_id, ticket_id):
            if comentario.id == comentario_id:
                return comentario
        raise _comentario_nao_encontrado(comentario_id)
