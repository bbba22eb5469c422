"""
Testes dos Use Cases de Comentários.

Visibilidade (Público/Interno), autoria para editar/excluir
e bloqueio em tickets inativos.
"""

from unittest.mock import patch

import pytest

from src.core.tickets.comentarios import (
    CriarComentarioService,
    EditarComentarioService,
    ExcluirComentarioService,
    ListarComentariosService,
    ObterComentarioService,
)
from src.core.tickets.dtos import CriarComentarioInputDTO, EditarComentarioInputDTO
from src.core.tickets.entities import TicketEntity, TicketPriority, TicketStatus
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)


@pytest.fixture
def ticket(ticket_repo, requester, agent, categoria, relogio):
    ticket = TicketEntity.criar(
        "Sem acesso ao ERP", "Erro 403 ao entrar", TicketPriority.MEDIA,
        requester.id, categoria.id, relogio(),
    )
    ticket.atribuir_a(agent, relogio())
    ticket_repo.save(ticket)
    return ticket


@pytest.fixture
def deps(ticket_repo, comentario_repo, usuario_repo, uow, relogio):
    return dict(
        ticket_repo=ticket_repo,
        comentario_repo=comentario_repo,
        usuario_repo=usuario_repo,
        uow=uow,
        relogio=relogio,
    )


@pytest.fixture
def comentar(deps, ticket):
    def _comentar(autor, mensagem="Verificando", visibilidade="Público"):
        return CriarComentarioService(**deps).execute(
            CriarComentarioInputDTO(autor.id, ticket.id, mensagem, visibilidade)
        )
    return _comentar


class TestCriarComentario:

    def test_publico_por_qualquer_usuario(self, comentar, outro_agent, uow):
        output = comentar(outro_agent, "  Também vejo isso  ")

        assert output.mensagem == "Também vejo isso"
        assert output.visibilidade == "Público"
        assert output.autor_nome == "Eva Martins"
        assert uow.published == []

    def test_interno_por_participante(self, comentar, agent):
        output = comentar(agent, "Senha resetada", "Interno")
        assert output.visibilidade == "Interno"

    def test_interno_por_nao_participante(self, comentar, outro_requester):
        with pytest.raises(ForbiddenError):
            comentar(outro_requester, "olá", "Interno")

    def test_visibilidade_invalida(self, comentar, requester):
        with pytest.raises(ValidationError, match="Visibilidade inválida"):
            comentar(requester, "olá", "Secreto")

    def test_mensagem_vazia(self, comentar, requester):
        with pytest.raises(ValidationError):
            comentar(requester, "   ")

    def test_ticket_fechado(self, comentar, requester, ticket, ticket_repo):
        salvo = ticket_repo.get_by_id(ticket.id)
        salvo.status = TicketStatus.FECHADO
        ticket_repo.save(salvo)

        with pytest.raises(BusinessRuleViolationError):
            comentar(requester)

    def test_ator_desconhecido(self, deps, ticket):
        with pytest.raises(UnauthorizedError):
            CriarComentarioService(**deps).execute(CriarComentarioInputDTO("x", ticket.id, "oi"))

    def test_trava_o_ticket(self, comentar, requester, ticket, ticket_repo):
        with patch.object(ticket_repo, "get_by_id", wraps=ticket_repo.get_by_id) as get_by_id:
            comentar(requester)

        get_by_id.assert_any_call(ticket.id, bloquear=True)



class TestEditarExcluirComentario:

    def test_autor_edita(self, deps, comentar, requester, ticket, relogio):
        comentario = comentar(requester, "original")
        depois = relogio.avancar(minutes=10)

        output = EditarComentarioService(**deps).execute(
            EditarComentarioInputDTO(requester.id, ticket.id, comentario.id, "corrigido")
        )

        assert output.mensagem == "editado: corrigido"
        assert output.criado_em == depois

    def test_outro_usuario_nao_edita(self, deps, comentar, requester, agent, ticket):
        comentario = comentar(requester)

        with pytest.raises(ForbiddenError, match="outras pessoas"):
            EditarComentarioService(**deps).execute(
                EditarComentarioInputDTO(agent.id, ticket.id, comentario.id, "novo")
            )

    def test_comentario_de_outro_ticket(self, deps, comentar, requester, ticket_repo, categoria, relogio):
        comentario = comentar(requester)
        outro = TicketEntity.criar("Outro", "Outro", TicketPriority.BAIXA, requester.id, categoria.id, relogio())
        ticket_repo.save(outro)

        with pytest.raises(EntityNotFoundError):
            EditarComentarioService(**deps).execute(
                EditarComentarioInputDTO(requester.id, outro.id, comentario.id, "novo")
            )

    def test_autor_exclui(self, deps, comentar, requester, ticket, comentario_repo):
        comentario = comentar(requester)

        ExcluirComentarioService(**deps).execute(requester.id, ticket.id, comentario.id)

        assert comentario_repo.list_by_ticket(ticket.id) == []

    def test_manager_nao_exclui_de_outro(self, deps, comentar, requester, manager, ticket):
        comentario = comentar(requester)

        with pytest.raises(ForbiddenError):
            ExcluirComentarioService(**deps).execute(manager.id, ticket.id, comentario.id)


class TestListarObterComentarios:

    @pytest.fixture
    def comentarios(self, comentar, requester, agent, relogio):
        publico = comentar(requester, "público")
        relogio.avancar(minutes=1)
        interno = comentar(agent, "interno", "Interno")
        return publico, interno

    def test_participante_lista_todos(self, ticket_repo, comentario_repo, usuario_repo,
                                      comentarios, ticket, manager):
        service = ListarComentariosService(ticket_repo, comentario_repo, usuario_repo)

        resultado = service.execute(manager.id, ticket.id)

        assert [c.mensagem for c in resultado] == ["interno", "público"]

    def test_nao_participante_lista_publicos(self, ticket_repo, comentario_repo, usuario_repo,
                                             comentarios, ticket, outro_requester):
        service = ListarComentariosService(ticket_repo, comentario_repo, usuario_repo)

        resultado = service.execute(outro_requester.id, ticket.id)

        assert [c.mensagem for c in resultado] == ["público"]

    def test_obter_interno_oculto(self, ticket_repo, comentario_repo, usuario_repo,
                                  comentarios, ticket, outro_requester):
        service = ObterComentarioService(ticket_repo, comentario_repo, usuario_repo)
        _, interno = comentarios

        with pytest.raises(EntityNotFoundError):
            service.execute(outro_requester.id, ticket.id, interno.id)

    def test_obter_por_participante(self, ticket_repo, comentario_repo, usuario_repo,
                                    comentarios, ticket, requester):
        service = ObterComentarioService(ticket_repo, comentario_repo, usuario_repo)
        _, interno = comentarios

        assert service.execute(requester.id, ticket.id, interno.id).mensagem == "interno"

    def test_autor_removido(self, ticket_repo, comentario_repo, usuario_repo,
                            comentarios, ticket, manager, requester):
        usuario_repo.delete(requester.id)
        service = ListarComentariosService(ticket_repo, comentario_repo, usuario_repo)

        resultado = service.execute(manager.id, ticket.id)

        assert resultado[-1].autor_nome == "(autor removido)"
