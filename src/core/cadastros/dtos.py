"""
DTOs do Domínio de Cadastros.

Input DTOs carregam sempre o `ator_id` de quem executa a operação;
Output DTOs são o que a API devolve.
"""

from dataclasses import dataclass
from typing import Optional

from .entities import CategoriaEntity, UsuarioEntity


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CriarCategoriaInputDTO:
    ator_id: str
    nome: str
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class CriarUsuarioInputDTO:
    ator_id: str
    nome: str
    email: str
    papel: str


@dataclass(frozen=True)
class AtualizarUsuarioInputDTO:
    """Atualização parcial: campos None ou em branco são ignorados."""

    ator_id: str
    usuario_id: str
    nome: Optional[str] = None
    email: Optional[str] = None
    papel: Optional[str] = None


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class CategoriaOutputDTO:
    """
    Categoria para exibição.

    `nome_exibicao` segue o formato "Pai - Nome" para subcategorias.
    """

    id: str
    nome: str
    parent_id: Optional[str]
    nome_exibicao: str

    @classmethod
    def from_entity(
        cls,
        entity: CategoriaEntity,
        pai: Optional[CategoriaEntity] = None,
    ) -> "CategoriaOutputDTO":
        exibicao = f"{pai.nome} - {entity.nome}" if pai else entity.nome
        return cls(
            id=entity.id,
            nome=entity.nome,
            parent_id=entity.parent_id,
            nome_exibicao=exibicao,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "parent_id": self.parent_id,
            "nome_exibicao": self.nome_exibicao,
        }


@dataclass
class UsuarioOutputDTO:
    id: str
    nome: str
    email: str
    papel: str

    @classmethod
    def from_entity(cls, entity: UsuarioEntity) -> "UsuarioOutputDTO":
        return cls(
            id=entity.id,
            nome=entity.nome,
            email=entity.email,
            papel=entity.papel.value,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "email": self.email,
            "papel": self.papel,
        }
