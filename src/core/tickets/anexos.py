"""
Use Cases de Anexos.

O arquivo vai para o FileStorage sob a chave
`tickets/{ticket_id}/{nome_arquivo}`; o banco guarda só os metadados.

Limites:
- Arquivo vazio é rejeitado
- Tamanho máximo configurável (10 MB por padrão)
- Extensões .exe, .bat e .sh bloqueadas
"""

from typing import FrozenSet, List
import logging
import os

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import EntityNotFoundError, ForbiddenError, ValidationError
from src.core.shared.relogio import Relogio, agora as relogio_padrao
from src.core.cadastros.ports import UsuarioRepository
from src.core.cadastros.use_cases import resolver_ator

from .entities import AnexoEntity, TicketEntity
from .ports import AnexoRepository, FileStorage, TicketRepository
from .dtos import AnexoOutputDTO, RegistrarAnexoInputDTO
from .use_cases import ticket_nao_encontrado

logger = logging.getLogger(__name__)

TAMANHO_MAXIMO_PADRAO = 10 * 1024 * 1024
EXTENSOES_BLOQUEADAS: FrozenSet[str] = frozenset({".exe", ".bat", ".sh"})
CONTENT_TYPE_PADRAO = "application/octet-stream"


def storage_key(ticket_id: str, nome_arquivo: str) -> str:
    return f"tickets/{ticket_id}/{nome_arquivo}"


class _AnexoService:
    def __init__(
        self,
        ticket_repo: TicketRepository,
        anexo_repo: AnexoRepository,
        usuario_repo: UsuarioRepository,
        storage: FileStorage,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.anexo_repo = anexo_repo
        self.usuario_repo = usuario_repo
        self.storage = storage
        self.uow = uow

    def _carregar_ticket(self, ticket_id: str) -> TicketEntity:
        ticket = self.ticket_repo.get_by_id(ticket_id, bloquear=True)
        if ticket is None:
            raise ticket_nao_encontrado(ticket_id)
        return ticket

    def _remover_arquivo(self, key: str) -> None:
        try:
            self.storage.delete(key)
        except Exception:
            logger.exception(f"Falha ao excluir arquivo '{key}' do storage")


class RegistrarAnexoService(_AnexoService):
    """
    Use Case: Anexar arquivo a um ticket ativo.

    Raises:
        UnauthorizedError: Ator inválido
        EntityNotFoundError: Ticket inexistente
        BusinessRuleViolationError: Ticket Fechado/Cancelado
        ValidationError: Arquivo vazio, grande demais ou extensão bloqueada
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        anexo_repo: AnexoRepository,
        usuario_repo: UsuarioRepository,
        storage: FileStorage,
        uow: UnitOfWork,
        tamanho_maximo: int = TAMANHO_MAXIMO_PADRAO,
        extensoes_bloqueadas: FrozenSet[str] = EXTENSOES_BLOQUEADAS,
        relogio: Relogio = relogio_padrao,
    ):
        super().__init__(ticket_repo, anexo_repo, usuario_repo, storage, uow)
        self.tamanho_maximo = tamanho_maximo
        self.extensoes_bloqueadas = frozenset(e.lower() for e in extensoes_bloqueadas)
        self.relogio = relogio

    def _validar_arquivo(self, input_dto: RegistrarAnexoInputDTO) -> str:
        nome = os.path.basename((input_dto.nome_arquivo or "").strip())
        if not nome or not input_dto.conteudo:
            raise ValidationError("Arquivo inválido.", field="arquivo")

        if len(input_dto.conteudo) > self.tamanho_maximo:
            mb = self.tamanho_maximo // (1024 * 1024)
            raise ValidationError(f"Máx {mb}MB.", field="arquivo")

        extensao = os.path.splitext(nome)[1].lower()
        if extensao and extensao in self.extensoes_bloqueadas:
            raise ValidationError("Extensão proibida.", field="arquivo")

        return nome

    def execute(self, input_dto: RegistrarAnexoInputDTO) -> AnexoOutputDTO:
        gravado = None
        try:
            with self.uow:
                ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
                ticket = self._carregar_ticket(input_dto.ticket_id)
                ticket.exigir_ativo("Não é possível anexar arquivos em tickets não ativos.")

                nome = self._validar_arquivo(input_dto)
                content_type = (input_dto.content_type or "").strip() or CONTENT_TYPE_PADRAO

                key = storage_key(ticket.id, nome)
                url = self.storage.save(key, input_dto.conteudo, content_type)
                gravado = key

                anexo = AnexoEntity(
                    ticket_id=ticket.id,
                    nome_arquivo=nome,
                    content_type=content_type,
                    tamanho_bytes=len(input_dto.conteudo),
                    storage_key=key,
                    url_publica=url,
                    autor_id=ator.id,
                    enviado_em=self.relogio(),
                )
                self.anexo_repo.save(anexo)
        except Exception:
            # Metadados desfeitos: o arquivo gravado não pode ficar órfão
            if gravado:
                self._remover_arquivo(gravado)
            raise

        logger.info(f"Anexo {anexo.id} ({anexo.tamanho_bytes} bytes) no ticket {ticket.id}")
        return AnexoOutputDTO.from_entity(anexo)


class ExcluirAnexoService(_AnexoService):
    """
    Use Case: Excluir anexo (somente quem enviou).

    Os metadados saem na transação; o arquivo é removido do
    storage depois do commit. Falha nessa remoção é registrada
    em log e não desfaz a exclusão.
    """

    def execute(self, ator_id: str, ticket_id: str, anexo_id: str) -> None:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, ator_id)
            ticket = self._carregar_ticket(ticket_id)
            ticket.exigir_ativo("Não é possível excluir anexos em tickets não ativos.")

            anexo = self.anexo_repo.get_by_id(ticket.id, anexo_id)
            if anexo is None:
                raise EntityNotFoundError(
                    "Anexo não encontrado.",
                    entity_type="Anexo",
                    entity_id=anexo_id,
                )

            if anexo.autor_id != ator.id:
                raise ForbiddenError(
                    "Não é possível excluir anexos de outras pessoas!",
                    rule="somente_autor",
                )

            self.anexo_repo.delete(anexo.id)

        if anexo.storage_key:
            self._remover_arquivo(anexo.storage_key)


class ListarAnexosService:
    def __init__(self, ticket_repo: TicketRepository, anexo_repo: AnexoRepository):
        self.ticket_repo = ticket_repo
        self.anexo_repo = anexo_repo

    def execute(self, ticket_id: str) -> List[AnexoOutputDTO]:
        if not self.ticket_repo.exists(ticket_id):
            raise ticket_nao_encontrado(ticket_id)
        return [AnexoOutputDTO.from_entity(a) for a in self.anexo_repo.list_by_ticket(ticket_id)]
