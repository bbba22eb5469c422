"""
Entidades de Cadastro: Usuários e Categorias.

Usuários e categorias são referenciados pelos tickets, mas têm
regras próprias e simples:

- UsuarioEntity: nome, e-mail único e exatamente um papel
- CategoriaEntity: taxonomia de no máximo dois níveis
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional
import re
import uuid

from src.core.shared.exceptions import ValidationError


class UserRole(Enum):
    """Papel do usuário. Cada usuário tem exatamente um."""

    REQUESTER = "Requester"
    AGENT = "Agent"
    MANAGER = "Manager"

    @classmethod
    def from_string(cls, value: str) -> "UserRole":
        """
        Converte string para enum (pelo nome ou pelo valor, sem caixa).

        Raises:
            ValueError: Se valor inválido
        """
        texto = (value or "").strip().lower()
        for papel in cls:
            if papel.value.lower() == texto or papel.name.lower() == texto:
                return papel
        raise ValueError(f"Papel inválido: {value}")


@dataclass
class UsuarioEntity:
    """
    Entidade de Domínio: Usuário.

    Attributes:
        id: Identificador único (UUID)
        nome: Nome de exibição
        email: E-mail (único, comparado sem caixa)
        papel: Requester, Agent ou Manager
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nome: str = ""
    email: str = ""
    papel: UserRole = UserRole.REQUESTER

    EMAIL_REGEX: ClassVar[re.Pattern] = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

    @classmethod
    def criar(cls, nome: str, email: str, papel: UserRole) -> "UsuarioEntity":
        """
        Factory method com validações.

        Raises:
            ValidationError: Nome vazio ou e-mail em formato inválido
        """
        nome = (nome or "").strip()

        if not nome:
            raise ValidationError("Nome é obrigatório.", field="nome")

        return cls(nome=nome, email=cls.validar_email(email), papel=papel)

    @classmethod
    def validar_email(cls, email: str) -> str:
        """Retorna o e-mail sem espaços nas pontas, ou lança ValidationError."""
        email = (email or "").strip()

        if not email:
            raise ValidationError("E-mail é obrigatório.", field="email")

        if not cls.EMAIL_REGEX.match(email):
            raise ValidationError("Formato de e-mail inválido.", field="email")

        return email

    @property
    def is_manager(self) -> bool:
        return self.papel == UserRole.MANAGER

    @property
    def is_agent(self) -> bool:
        return self.papel == UserRole.AGENT

    @property
    def is_requester(self) -> bool:
        return self.papel == UserRole.REQUESTER

    def __eq__(self, other) -> bool:
        if not isinstance(other, UsuarioEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class CategoriaEntity:
    """
    Entidade de Domínio: Categoria de ticket.

    Invariante: no máximo dois níveis. Uma categoria que já tem pai
    não pode ser pai de outra.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nome: str = ""
    parent_id: Optional[str] = None

    NOME_MAX_LENGTH: ClassVar[int] = 180

    @classmethod
    def criar(cls, nome: str, parent_id: Optional[str] = None) -> "CategoriaEntity":
        nome = (nome or "").strip()

        if not nome:
            raise ValidationError("Nome é obrigatório.", field="nome")

        if len(nome) > cls.NOME_MAX_LENGTH:
            raise ValidationError(
                f"Nome excede o limite de {cls.NOME_MAX_LENGTH} caracteres "
                f"(atual: {len(nome)}).",
                field="nome",
            )

        return cls(nome=nome, parent_id=parent_id or None)

    @property
    def e_subcategoria(self) -> bool:
        return self.parent_id is not None

    def __eq__(self, other) -> bool:
        if not isinstance(other, CategoriaEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
