"""
Use Cases do Domínio de Cadastros (usuários e categorias).

Escritas são exclusivas de Managers. Leituras não exigem ator.

Use Cases implementados:
- CriarCategoriaService / ExcluirCategoriaService
- ListarCategoriasService / ObterCategoriaService
- CriarUsuarioService / AtualizarUsuarioService / ExcluirUsuarioService
- ListarUsuariosService / ObterUsuarioService

`resolver_ator` é reutilizado pelos use cases de tickets.
"""

from typing import List, Optional
import logging

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    ConflictError,
    EntityNotFoundError,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)

from .entities import CategoriaEntity, UserRole, UsuarioEntity
from .ports import CategoriaRepository, TicketsAtivosQuery, UsuarioRepository
from .dtos import (
    AtualizarUsuarioInputDTO,
    CategoriaOutputDTO,
    CriarCategoriaInputDTO,
    CriarUsuarioInputDTO,
    UsuarioOutputDTO,
)

logger = logging.getLogger(__name__)

PAPEL_INVALIDO = "Role inválida (Requester, Agent, Manager)."


def resolver_ator(usuario_repo: UsuarioRepository, ator_id: Optional[str]) -> UsuarioEntity:
    """
    Resolve o identificador do chamador para um usuário.

    Raises:
        UnauthorizedError: Se o identificador é vazio ou desconhecido
    """
    ator = usuario_repo.get_by_id(ator_id) if ator_id else None
    if ator is None:
        raise UnauthorizedError()
    return ator


def _exigir_manager(ator: UsuarioEntity, acao: str) -> None:
    if not ator.is_manager:
        raise ForbiddenError(f"Apenas Managers podem {acao}.", rule="somente_manager")


def _parse_papel(valor: str) -> UserRole:
    try:
        return UserRole.from_string(valor)
    except ValueError:
        raise ValidationError(PAPEL_INVALIDO, field="papel")


# =============================================================================
# Categorias
# =============================================================================

class CriarCategoriaService:
    """
    Use Case: Criar categoria ou subcategoria.

    Regras:
    - Somente Manager
    - Nome obrigatório, até 180 caracteres, único (sem caixa)
    - Pai deve existir e não pode ser subcategoria (dois níveis no máximo)
    """

    def __init__(
        self,
        categoria_repo: CategoriaRepository,
        usuario_repo: UsuarioRepository,
        uow: UnitOfWork,
    ):
        self.categoria_repo = categoria_repo
        self.usuario_repo = usuario_repo
        self.uow = uow

    def execute(self, input_dto: CriarCategoriaInputDTO) -> CategoriaOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            _exigir_manager(ator, "criar categorias")

            categoria = CategoriaEntity.criar(input_dto.nome, input_dto.parent_id)

            if self.categoria_repo.get_by_nome(categoria.nome):
                raise ConflictError("Já existe categoria com esse nome.")

            pai = None
            if categoria.parent_id:
                pai = self.categoria_repo.get_by_id(categoria.parent_id)
                if pai is None:
                    raise ValidationError("Categoria pai inexistente.", field="parent_id")
                if pai.e_subcategoria:
                    raise ConflictError(
                        "Categorias têm no máximo dois níveis. "
                        "O pai informado já é uma subcategoria."
                    )

            self.categoria_repo.save(categoria)

        logger.info(f"Categoria criada: {categoria.id} ({categoria.nome})")
        return CategoriaOutputDTO.from_entity(categoria, pai)


class ExcluirCategoriaService:
    """
    Use Case: Excluir categoria.

    Bloqueada (Conflict) se houver subcategorias ou tickets ativos
    vinculados. Tickets inativos ficam com categoria nula.
    """

    def __init__(
        self,
        categoria_repo: CategoriaRepository,
        usuario_repo: UsuarioRepository,
        tickets_ativos: TicketsAtivosQuery,
        uow: UnitOfWork,
    ):
        self.categoria_repo = categoria_repo
        self.usuario_repo = usuario_repo
        self.tickets_ativos = tickets_ativos
        self.uow = uow

    def execute(self, ator_id: str, categoria_id: str) -> None:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, ator_id)
            _exigir_manager(ator, "deletar categorias")

            if not self.categoria_repo.exists(categoria_id):
                raise EntityNotFoundError(
                    "Categoria não encontrada.",
                    entity_type="Categoria",
                    entity_id=categoria_id,
                )

            if self.categoria_repo.has_children(categoria_id):
                raise ConflictError("Categoria possui subcategorias (filhos).")

            if self.tickets_ativos.exists_ativo_por_categoria(categoria_id):
                raise ConflictError("Categoria está associada a tickets ativos.")

            self.categoria_repo.delete(categoria_id)

        logger.info(f"Categoria excluída: {categoria_id}")


class ListarCategoriasService:
    """Use Case: Listar categorias (filtro por nome e por pai)."""

    def __init__(self, categoria_repo: CategoriaRepository):
        self.categoria_repo = categoria_repo

    def execute(
        self,
        nome: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> List[CategoriaOutputDTO]:
        categorias = self.categoria_repo.list(nome=nome, parent_id=parent_id)
        pais = {}
        resultado = []
        for categoria in categorias:
            pai = None
            if categoria.parent_id:
                if categoria.parent_id not in pais:
                    pais[categoria.parent_id] = self.categoria_repo.get_by_id(categoria.parent_id)
                pai = pais[categoria.parent_id]
            resultado.append(CategoriaOutputDTO.from_entity(categoria, pai))
        return resultado


class ObterCategoriaService:
    """Use Case: Obter categoria por ID."""

    def __init__(self, categoria_repo: CategoriaRepository):
        self.categoria_repo = categoria_repo

    def execute(self, categoria_id: str) -> CategoriaOutputDTO:
        categoria = self.categoria_repo.get_by_id(categoria_id)
        if categoria is None:
            raise EntityNotFoundError(
                "Categoria não encontrada.",
                entity_type="Categoria",
                entity_id=categoria_id,
            )
        pai = self.categoria_repo.get_by_id(categoria.parent_id) if categoria.parent_id else None
        return CategoriaOutputDTO.from_entity(categoria, pai)


# =============================================================================
# Usuários
# =============================================================================

class CriarUsuarioService:
    """
    Use Case: Criar usuário.

    Regras:
    - Somente Manager
    - Nome e e-mail obrigatórios; e-mail em formato válido e único
    - Papel deve ser Requester, Agent ou Manager
    """

    def __init__(self, usuario_repo: UsuarioRepository, uow: UnitOfWork):
        self.usuario_repo = usuario_repo
        self.uow = uow

    def execute(self, input_dto: CriarUsuarioInputDTO) -> UsuarioOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            _exigir_manager(ator, "inserir usuários")

            papel = _parse_papel(input_dto.papel)
            usuario = UsuarioEntity.criar(input_dto.nome, input_dto.email, papel)

            if self.usuario_repo.get_by_email(usuario.email):
                raise ConflictError("Já existe usuário com esse e-mail.")

            self.usuario_repo.save(usuario)

        logger.info(f"Usuário criado: {usuario.id} ({usuario.papel.value})")
        return UsuarioOutputDTO.from_entity(usuario)


class AtualizarUsuarioService:
    """Use Case: Atualizar usuário parcialmente (somente Manager)."""

    def __init__(self, usuario_repo: UsuarioRepository, uow: UnitOfWork):
        self.usuario_repo = usuario_repo
        self.uow = uow

    def execute(self, input_dto: AtualizarUsuarioInputDTO) -> UsuarioOutputDTO:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, input_dto.ator_id)
            _exigir_manager(ator, "atualizar usuários")

            usuario = self.usuario_repo.get_by_id(input_dto.usuario_id)
            if usuario is None:
                raise EntityNotFoundError(
                    "Usuário não encontrado.",
                    entity_type="Usuario",
                    entity_id=input_dto.usuario_id,
                )

            alterado = False

            if input_dto.nome and input_dto.nome.strip():
                nome = input_dto.nome.strip()
                if nome != usuario.nome:
                    usuario.nome = nome
                    alterado = True

            if input_dto.email and input_dto.email.strip():
                email = UsuarioEntity.validar_email(input_dto.email)
                if email.lower() != usuario.email.lower():
                    existente = self.usuario_repo.get_by_email(email)
                    if existente and existente.id != usuario.id:
                        raise ConflictError("Já existe usuário com esse e-mail.")
                    usuario.email = email
                    alterado = True

            if input_dto.papel and input_dto.papel.strip():
                papel = _parse_papel(input_dto.papel)
                if papel != usuario.papel:
                    usuario.papel = papel
                    alterado = True

            if not alterado:
                raise ValidationError("Nenhuma alteração detectada.")

            self.usuario_repo.save(usuario)

        return UsuarioOutputDTO.from_entity(usuario)


class ExcluirUsuarioService:
    """
    Use Case: Excluir usuário.

    Bloqueada (Conflict) se o usuário é responsável ou solicitante
    de algum ticket ativo. Em tickets inativos e comentários, as
    referências ao usuário passam a ser nulas.
    """

    def __init__(
        self,
        usuario_repo: UsuarioRepository,
        tickets_ativos: TicketsAtivosQuery,
        uow: UnitOfWork,
    ):
        self.usuario_repo = usuario_repo
        self.tickets_ativos = tickets_ativos
        self.uow = uow

    def execute(self, ator_id: str, usuario_id: str) -> None:
        with self.uow:
            ator = resolver_ator(self.usuario_repo, ator_id)
            _exigir_manager(ator, "excluir usuários")

            if self.usuario_repo.get_by_id(usuario_id) is None:
                raise EntityNotFoundError(
                    "Usuário não encontrado.",
                    entity_type="Usuario",
                    entity_id=usuario_id,
                )

            if self.tickets_ativos.exists_ativo_como_responsavel(usuario_id):
                raise ConflictError("Usuário possui tickets ativos vinculados como agent!")

            if self.tickets_ativos.exists_ativo_como_solicitante(usuario_id):
                raise ConflictError("Usuário possui tickets ativos vinculados como requester!")

            self.usuario_repo.delete(usuario_id)

        logger.info(f"Usuário excluído: {usuario_id}")


class ObterUsuarioService:
    def __init__(self, usuario_repo: UsuarioRepository):
        self.usuario_repo = usuario_repo

    def execute(self, usuario_id: str) -> UsuarioOutputDTO:
        usuario = self.usuario_repo.get_by_id(usuario_id)
        if usuario is None:
            raise EntityNotFoundError(
                "Usuário não encontrado.",
                entity_type="Usuario",
                entity_id=usuario_id,
            )
        return UsuarioOutputDTO.from_entity(usuario)


class ListarUsuariosService:
    def __init__(self, usuario_repo: UsuarioRepository):
        self.usuario_repo = usuario_repo

    def execute(self, papel: Optional[str] = None) -> List[UsuarioOutputDTO]:
        filtro = _parse_papel(papel) if papel else None
        return [UsuarioOutputDTO.from_entity(u) for u in self.usuario_repo.list(papel=filtro)]
