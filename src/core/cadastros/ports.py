"""
Ports (Interfaces) do Domínio de Cadastros.

- UsuarioRepository: diretório de usuários (resolve o ator de cada operação)
- CategoriaRepository: diretório de categorias
- TicketsAtivosQuery: consulta usada para bloquear exclusões

Implementações em memória ficam aqui, como no domínio de tickets,
para testes unitários sem banco.
"""

from copy import deepcopy
from typing import Dict, List, Optional, Protocol, runtime_checkable

from .entities import CategoriaEntity, UserRole, UsuarioEntity


@runtime_checkable
class UsuarioRepository(Protocol):
    """
    Diretório de usuários.

    `get_by_id` é o "FindUser" consumido por todos os use cases:
    retorna None quando o identificador não corresponde a ninguém.
    """

    def save(self, usuario: UsuarioEntity) -> None:
        ...

    def get_by_id(self, usuario_id: str) -> Optional[UsuarioEntity]:
        ...

    def get_by_email(self, email: str) -> Optional[UsuarioEntity]:
        """Busca por e-mail, sem diferenciar maiúsculas/minúsculas."""
        ...

    def delete(self, usuario_id: str) -> None:
        ...

    def list(self, papel: Optional[UserRole] = None) -> List[UsuarioEntity]:
        ...


@runtime_checkable
class CategoriaRepository(Protocol):
    """Diretório de categorias ("CategoryExists" / "GetCategory")."""

    def save(self, categoria: CategoriaEntity) -> None:
        ...

    def get_by_id(self, categoria_id: str) -> Optional[CategoriaEntity]:
        ...

    def exists(self, categoria_id: str) -> bool:
        ...

    def get_by_nome(self, nome: str) -> Optional[CategoriaEntity]:
        """Busca por nome, sem diferenciar maiúsculas/minúsculas."""
        ...

    def has_children(self, categoria_id: str) -> bool:
        ...

    def delete(self, categoria_id: str) -> None:
        ...

    def list(
        self,
        nome: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> List[CategoriaEntity]:
        ...


class TicketsAtivosQuery(Protocol):
    """Consulta de vínculos com tickets ativos (não Fechado/Cancelado)."""

    def exists_ativo_por_categoria(self, categoria_id: str) -> bool:
        ...

    def exists_ativo_como_solicitante(self, usuario_id: str) -> bool:
        ...

    def exists_ativo_como_responsavel(self, usuario_id: str) -> bool:
        ...


class InMemoryUsuarioRepository:
    """
    Implementação em memória do UsuarioRepository.

    Devolve cópias, para que o use case só altere o estado
    armazenado através de `save`.
    """

    def __init__(self):
        self._usuarios: Dict[str, UsuarioEntity] = {}

    def save(self, usuario: UsuarioEntity) -> None:
        self._usuarios[usuario.id] = deepcopy(usuario)

    def get_by_id(self, usuario_id: str) -> Optional[UsuarioEntity]:
        usuario = self._usuarios.get(usuario_id)
        return deepcopy(usuario) if usuario else None

    def get_by_email(self, email: str) -> Optional[UsuarioEntity]:
        alvo = (email or "").strip().lower()
        for usuario in self._usuarios.values():
            if usuario.email.lower() == alvo:
                return deepcopy(usuario)
        return None

    def delete(self, usuario_id: str) -> None:
        self._usuarios.pop(usuario_id, None)

    def list(self, papel: Optional[UserRole] = None) -> List[UsuarioEntity]:
        usuarios = sorted(self._usuarios.values(), key=lambda u: u.nome)
        if papel:
            usuarios = [u for u in usuarios if u.papel == papel]
        return [deepcopy(u) for u in usuarios]

    def clear(self) -> None:
        self._usuarios.clear()


class InMemoryCategoriaRepository:
    """Implementação em memória do CategoriaRepository."""

    def __init__(self):
        self._categorias: Dict[str, CategoriaEntity] = {}

    def save(self, categoria: CategoriaEntity) -> None:
        self._categorias[categoria.id] = deepcopy(categoria)

    def get_by_id(self, categoria_id: str) -> Optional[CategoriaEntity]:
        categoria = self._categorias.get(categoria_id)
        return deepcopy(categoria) if categoria else None

    def exists(self, categoria_id: str) -> bool:
        return categoria_id in self._categorias

    def get_by_nome(self, nome: str) -> Optional[CategoriaEntity]:
        alvo = (nome or "").strip().lower()
        for categoria in self._categorias.values():
            if categoria.nome.lower() == alvo:
                return deepcopy(categoria)
        return None

    def has_children(self, categoria_id: str) -> bool:
        return any(c.parent_id == categoria_id for c in self._categorias.values())

    def delete(self, categoria_id: str) -> None:
        self._categorias.pop(categoria_id, None)

    def list(
        self,
        nome: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> List[CategoriaEntity]:
        categorias = sorted(self._categorias.values(), key=lambda c: c.nome)
        if nome:
            categorias = [c for c in categorias if nome.lower() in c.nome.lower()]
        if parent_id:
            categorias = [c for c in categorias if c.parent_id == parent_id]
        return [deepcopy(c) for c in categorias]

