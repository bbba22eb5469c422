"""
Configurações globais do Pytest para o HelpDesk.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures compartilhadas pelos testes do core:
repositórios em memória, um Unit of Work fake, relógio fixo
e um diretório de usuários/categorias já populado.
"""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from src.core.cadastros.entities import CategoriaEntity, UserRole, UsuarioEntity
from src.core.cadastros.ports import InMemoryCategoriaRepository, InMemoryUsuarioRepository
from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import UnitOfWork
from src.core.tickets.ports import (
    InMemoryAnexoRepository,
    InMemoryComentarioRepository,
    InMemoryFileStorage,
    InMemoryNotificationDispatcher,
    InMemoryTicketAcaoRepository,
    InMemoryTicketRepository,
)

AGORA = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configuração do pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


class FakeUnitOfWork(UnitOfWork):
    """
    Fake Unit of Work para testes.

    Permite testar:
    - Comportamento de commit/rollback
    - Eventos entregues só depois do commit
    """

    def __init__(self):
        super().__init__()
        self.published: List[DomainEvent] = []
        self.commits = 0
        self.rollbacks = 0

    def _begin_transaction(self):
        pass

    def commit(self):
        self.commits += 1
        self.published.extend(self._events)
        self._events.clear()

    def rollback(self):
        self.rollbacks += 1
        self._events.clear()


class RelogioFixo:
    """Relógio controlável: devolve sempre o mesmo instante até `avancar`."""

    def __init__(self, agora: datetime = AGORA):
        self.agora = agora

    def __call__(self) -> datetime:
        return self.agora

    def avancar(self, **kwargs) -> datetime:
        self.agora = self.agora + timedelta(**kwargs)
        return self.agora


# =============================================================================
# Infraestrutura fake
# =============================================================================

@pytest.fixture
def uow():
    return FakeUnitOfWork()


@pytest.fixture
def relogio():
    return RelogioFixo()


@pytest.fixture
def ticket_repo():
    """Fixture para repositório em memória."""
    return InMemoryTicketRepository()


@pytest.fixture
def acao_repo():
    return InMemoryTicketAcaoRepository()


@pytest.fixture
def comentario_repo():
    return InMemoryComentarioRepository()


@pytest.fixture
def anexo_repo():
    return InMemoryAnexoRepository()


@pytest.fixture
def storage():
    return InMemoryFileStorage()


@pytest.fixture
def dispatcher():
    return InMemoryNotificationDispatcher()


# =============================================================================
# Diretório (usuários e categorias)
# =============================================================================

@pytest.fixture
def usuario_repo():
    return InMemoryUsuarioRepository()


@pytest.fixture
def categoria_repo():
    return InMemoryCategoriaRepository()


def _usuario(repo, nome, email, papel):
    usuario = UsuarioEntity.criar(nome, email, papel)
    repo.save(usuario)
    return usuario


@pytest.fixture
def manager(usuario_repo):
    return _usuario(usuario_repo, "Clara Thompson", "clara.thompson@acme.com", UserRole.MANAGER)


@pytest.fixture
def agent(usuario_repo):
    return _usuario(usuario_repo, "Bob Miller", "bob.miller@acme.com", UserRole.AGENT)


@pytest.fixture
def outro_agent(usuario_repo):
    return _usuario(usuario_repo, "Eva Martins", "eva.martins@acme.com", UserRole.AGENT)


@pytest.fixture
def requester(usuario_repo):
    return _usuario(usuario_repo, "Alice Johnson", "alice.johnson@acme.com", UserRole.REQUESTER)


@pytest.fixture
def outro_requester(usuario_repo):
    return _usuario(usuario_repo, "Diego Souza", "diego.souza@acme.com", UserRole.REQUESTER)


@pytest.fixture
def categoria(categoria_repo):
    categoria = CategoriaEntity.criar("Infraestrutura")
    categoria_repo.save(categoria)
    return categoria


@pytest.fixture
def outra_categoria(categoria_repo):
    categoria = CategoriaEntity.criar("Redes")
    categoria_repo.save(categoria)
    return categoria
