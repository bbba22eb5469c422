"""
Testes dos Use Cases de Anexos (upload, exclusão e listagem).
"""

from unittest.mock import patch

import pytest

from src.core.tickets.anexos import (
    ExcluirAnexoService,
    ListarAnexosService,
    RegistrarAnexoService,
    storage_key,
)
from src.core.tickets.dtos import RegistrarAnexoInputDTO
from src.core.tickets.entities import TicketEntity, TicketPriority
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ForbiddenError,
    ValidationError,
)


@pytest.fixture
def ticket(ticket_repo, requester, categoria, relogio):
    ticket = TicketEntity.criar(
        "Monitor piscando", "Desde a troca do cabo", TicketPriority.BAIXA,
        requester.id, categoria.id, relogio(),
    )
    ticket_repo.save(ticket)
    return ticket


@pytest.fixture
def registrar(ticket_repo, anexo_repo, usuario_repo, storage, uow, relogio):
    return RegistrarAnexoService(
        ticket_repo, anexo_repo, usuario_repo, storage, uow,
        tamanho_maximo=1024, relogio=relogio,
    )


@pytest.fixture
def excluir(ticket_repo, anexo_repo, usuario_repo, storage, uow):
    return ExcluirAnexoService(ticket_repo, anexo_repo, usuario_repo, storage, uow)


def _upload(ator, ticket, nome="foto.png", conteudo=b"\x89PNG", content_type="image/png"):
    return RegistrarAnexoInputDTO(
        ator_id=ator.id,
        ticket_id=ticket.id,
        nome_arquivo=nome,
        conteudo=conteudo,
        content_type=content_type,
    )


class TestRegistrarAnexo:

    def test_upload(self, registrar, requester, ticket, storage, relogio):
        output = registrar.execute(_upload(requester, ticket))

        key = storage_key(ticket.id, "foto.png")
        assert key == f"tickets/{ticket.id}/foto.png"
        assert storage.arquivos[key] == b"\x89PNG"
        assert output.url_publica == f"memory://{key}"
        assert output.tamanho_bytes == 4
        assert output.autor_id == requester.id
        assert output.enviado_em == relogio.agora

    def test_content_type_padrao(self, registrar, requester, ticket):
        output = registrar.execute(_upload(requester, ticket, content_type=""))
        assert output.content_type == "application/octet-stream"

    def test_nome_sem_diretorios(self, registrar, requester, ticket):
        output = registrar.execute(_upload(requester, ticket, nome="../../etc/passwd.txt"))
        assert output.nome_arquivo == "passwd.txt"

    def test_arquivo_vazio(self, registrar, requester, ticket):
        with pytest.raises(ValidationError, match="Arquivo inválido."):
            registrar.execute(_upload(requester, ticket, conteudo=b""))

    def test_arquivo_grande(self, ticket_repo, anexo_repo, usuario_repo, storage, uow,
                            requester, ticket):
        service = RegistrarAnexoService(ticket_repo, anexo_repo, usuario_repo, storage, uow)

        with pytest.raises(ValidationError, match="Máx 10MB."):
            service.execute(_upload(requester, ticket, conteudo=b"0" * (10 * 1024 * 1024 + 1)))

    @pytest.mark.parametrize("nome", ["setup.exe", "script.BAT", "deploy.sh"])
    def test_extensao_proibida(self, registrar, requester, ticket, storage, nome):
        with pytest.raises(ValidationError, match="Extensão proibida."):
            registrar.execute(_upload(requester, ticket, nome=nome))

        assert storage.arquivos == {}

    def test_ticket_cancelado(self, registrar, requester, ticket, ticket_repo, relogio):
        salvo = ticket_repo.get_by_id(ticket.id)
        salvo.cancelar("duplicado", relogio())
        ticket_repo.save(salvo)

        with pytest.raises(BusinessRuleViolationError):
            registrar.execute(_upload(requester, ticket))

    def test_ticket_inexistente(self, registrar, requester, ticket):
        with pytest.raises(EntityNotFoundError):
            registrar.execute(RegistrarAnexoInputDTO(requester.id, "nao-existe", "a.txt", b"a"))

    def test_trava_o_ticket(self, registrar, requester, ticket, ticket_repo):
        with patch.object(ticket_repo, "get_by_id", wraps=ticket_repo.get_by_id) as get_by_id:
            registrar.execute(_upload(requester, ticket))

        get_by_id.assert_any_call(ticket.id, bloquear=True)

    def test_falha_nos_metadados_remove_arquivo(self, registrar, anexo_repo, requester, ticket,
                                                storage, uow):
        with patch.object(anexo_repo, "save", side_effect=RuntimeError("banco fora")):
            with pytest.raises(RuntimeError, match="banco fora"):
                registrar.execute(_upload(requester, ticket))

        assert storage.arquivos == {}
        assert anexo_repo.list_by_ticket(ticket.id) == []
        assert uow.rollbacks == 1



class TestExcluirListarAnexo:

    def test_autor_exclui(self, registrar, excluir, requester, ticket, storage, anexo_repo):
        anexo = registrar.execute(_upload(requester, ticket))

        excluir.execute(requester.id, ticket.id, anexo.id)

        assert anexo_repo.list_by_ticket(ticket.id) == []
        assert storage.arquivos == {}

    def test_outro_usuario_nao_exclui(self, registrar, excluir, requester, manager, ticket):
        anexo = registrar.execute(_upload(requester, ticket))

        with pytest.raises(ForbiddenError):
            excluir.execute(manager.id, ticket.id, anexo.id)

    def test_anexo_inexistente(self, excluir, requester, ticket):
        with pytest.raises(EntityNotFoundError, match="Anexo não encontrado."):
            excluir.execute(requester.id, ticket.id, "nao-existe")

    def test_falha_no_storage_nao_desfaz(self, registrar, ticket_repo, anexo_repo, usuario_repo,
                                         uow, requester, ticket):
        anexo = registrar.execute(_upload(requester, ticket))

        class StorageQuebrado:
            def delete(self, key):
                raise OSError("disco cheio")

        service = ExcluirAnexoService(ticket_repo, anexo_repo, usuario_repo, StorageQuebrado(), uow)
        service.execute(requester.id, ticket.id, anexo.id)

        assert anexo_repo.get_by_id(ticket.id, anexo.id) is None

    def test_listar(self, registrar, ticket_repo, anexo_repo, requester, ticket, relogio):
        primeiro = registrar.execute(_upload(requester, ticket, nome="a.png"))
        relogio.avancar(seconds=30)
        segundo = registrar.execute(_upload(requester, ticket, nome="b.png"))

        resultado = ListarAnexosService(ticket_repo, anexo_repo).execute(ticket.id)

        assert [a.id for a in resultado] == [primeiro.id, segundo.id]

    def test_listar_ticket_inexistente(self, ticket_repo, anexo_repo):
        with pytest.raises(EntityNotFoundError):
            ListarAnexosService(ticket_repo, anexo_repo).execute("nao-existe")
