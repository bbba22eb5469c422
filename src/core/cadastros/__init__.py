"""
Domínio de Cadastros - Usuários e Categorias.

Colaboradores do domínio de tickets:
- Usuários resolvem o ator de cada operação e carregam o papel
  (Requester, Agent, Manager)
- Categorias formam uma taxonomia de no máximo dois níveis
"""

from .entities import UserRole, UsuarioEntity, CategoriaEntity
from .ports import (
    UsuarioRepository,
    CategoriaRepository,
    InMemoryUsuarioRepository,
    InMemoryCategoriaRepository,
)
from .use_cases import resolver_ator

__all__ = [
    "UserRole",
    "UsuarioEntity",
    "CategoriaEntity",
    "UsuarioRepository",
    "CategoriaRepository",
    "InMemoryUsuarioRepository",
    "InMemoryCategoriaRepository",
    "resolver_ator",
]
