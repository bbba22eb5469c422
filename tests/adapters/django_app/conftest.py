"""
Configuração pytest para testes com Django.

O settings de teste (src.config.settings_test) vem do pyproject:
- SQLite em memória
- E-mail locmem (mail.outbox)
- Celery eager
- Storage em memória

Os repositórios são sobrescritos pelas implementações Django, de modo
que as fixtures de usuários e categorias do conftest raiz passam a
gravar no banco de teste.
"""

import json

import pytest

from src.adapters.django_app.tickets.repositories import (
    DjangoAnexoRepository,
    DjangoCategoriaRepository,
    DjangoComentarioRepository,
    DjangoTicketAcaoRepository,
    DjangoTicketRepository,
    DjangoUsuarioRepository,
)
from src.config.container import reset_container


@pytest.fixture(autouse=True)
def container_limpo():
    """Cada teste monta o container a partir do settings corrente."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def usuario_repo(db):
    return DjangoUsuarioRepository()


@pytest.fixture
def categoria_repo(db):
    return DjangoCategoriaRepository()


@pytest.fixture
def ticket_repo(db):
    return DjangoTicketRepository()


@pytest.fixture
def acao_repo(db):
    return DjangoTicketAcaoRepository()


@pytest.fixture
def comentario_repo(db):
    return DjangoComentarioRepository()


@pytest.fixture
def anexo_repo(db):
    return DjangoAnexoRepository()


class ApiClient:
    """Envolve o Client do Django: JSON no corpo e X-User-Id no header."""

    def __init__(self, client):
        self.client = client

    def _enviar(self, metodo, url, ator=None, data=None):
        extra = {}
        if ator is not None:
            extra["HTTP_X_USER_ID"] = ator.id
        chamada = getattr(self.client, metodo)
        if data is None:
            return chamada(url, **extra)
        return chamada(url, data=json.dumps(data), content_type="application/json", **extra)

    def get(self, url, ator=None, data=None):
        extra = {"HTTP_X_USER_ID": ator.id} if ator is not None else {}
        return self.client.get(url, data or {}, **extra)

    def post(self, url, ator=None, data=None):
        return self._enviar("post", url, ator, data or {})

    def patch(self, url, ator=None, data=None):
        return self._enviar("patch", url, ator, data or {})

    def put(self, url, ator=None, data=None):
        return self._enviar("put", url, ator, data or {})

    def delete(self, url, ator=None):
        return self._enviar("delete", url, ator)


@pytest.fixture
def api(client, db):
    return ApiClient(client)
