"""
Testes Unitários para Use Cases de Cadastros (usuários e categorias).

Coverage:
- Somente Manager escreve
- Unicidade de nome de categoria e e-mail de usuário
- Hierarquia de categorias em dois níveis
- Exclusões bloqueadas por tickets ativos
"""

import pytest

from src.core.cadastros.dtos import (
    AtualizarUsuarioInputDTO,
    CriarCategoriaInputDTO,
    CriarUsuarioInputDTO,
)
from src.core.cadastros.entities import UserRole
from src.core.cadastros.use_cases import (
    AtualizarUsuarioService,
    CriarCategoriaService,
    CriarUsuarioService,
    ExcluirCategoriaService,
    ExcluirUsuarioService,
    ListarCategoriasService,
    ListarUsuariosService,
    ObterCategoriaService,
    ObterUsuarioService,
    resolver_ator,
)
from src.core.tickets.entities import TicketEntity, TicketPriority
from src.core.shared.exceptions import (
    ConflictError,
    EntityNotFoundError,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)


@pytest.fixture
def criar_categoria(categoria_repo, usuario_repo, uow):
    return CriarCategoriaService(categoria_repo, usuario_repo, uow)


@pytest.fixture
def criar_usuario(usuario_repo, uow):
    return CriarUsuarioService(usuario_repo, uow)


def _ticket(ticket_repo, solicitante_id, categoria_id, relogio, responsavel=None):
    ticket = TicketEntity.criar("Teclado", "Teclas travando", TicketPriority.BAIXA,
                                solicitante_id, categoria_id, relogio())
    if responsavel:
        ticket.atribuir_a(responsavel, relogio())
    ticket_repo.save(ticket)
    return ticket


class TestResolverAtor:

    def test_ator_valido(self, usuario_repo, requester):
        assert resolver_ator(usuario_repo, requester.id).nome == "Alice Johnson"

    @pytest.mark.parametrize("ator_id", [None, "", "desconhecido"])
    def test_ator_invalido(self, usuario_repo, ator_id):
        with pytest.raises(UnauthorizedError):
            resolver_ator(usuario_repo, ator_id)


class TestCategorias:

    def test_criar_subcategoria(self, criar_categoria, manager, categoria):
        output = criar_categoria.execute(
            CriarCategoriaInputDTO(manager.id, "Serviços em Nuvem", categoria.id)
        )

        assert output.parent_id == categoria.id
        assert output.nome_exibicao == "Infraestrutura - Serviços em Nuvem"

    def test_somente_manager(self, criar_categoria, agent):
        with pytest.raises(ForbiddenError, match="Apenas Managers podem criar categorias."):
            criar_categoria.execute(CriarCategoriaInputDTO(agent.id, "Hardware"))

    def test_nome_duplicado_sem_caixa(self, criar_categoria, manager, categoria):
        with pytest.raises(ConflictError):
            criar_categoria.execute(CriarCategoriaInputDTO(manager.id, "infraestrutura"))

    def test_nome_muito_longo(self, criar_categoria, manager):
        with pytest.raises(ValidationError):
            criar_categoria.execute(CriarCategoriaInputDTO(manager.id, "x" * 181))

    def test_pai_inexistente(self, criar_categoria, manager):
        with pytest.raises(ValidationError, match="Categoria pai inexistente."):
            criar_categoria.execute(CriarCategoriaInputDTO(manager.id, "Firewall", "nao-existe"))

    def test_terceiro_nivel_proibido(self, criar_categoria, manager, categoria):
        filha = criar_categoria.execute(CriarCategoriaInputDTO(manager.id, "Bancos de Dados", categoria.id))

        with pytest.raises(ConflictError, match="dois níveis"):
            criar_categoria.execute(CriarCategoriaInputDTO(manager.id, "PostgreSQL", filha.id))

    def test_excluir_com_filhos(self, criar_categoria, categoria_repo, usuario_repo, ticket_repo,
                                uow, manager, categoria):
        criar_categoria.execute(CriarCategoriaInputDTO(manager.id, "LAN/WAN", categoria.id))
        service = ExcluirCategoriaService(categoria_repo, usuario_repo, ticket_repo, uow)

        with pytest.raises(ConflictError, match="subcategorias"):
            service.execute(manager.id, categoria.id)

    def test_excluir_com_ticket_ativo(self, categoria_repo, usuario_repo, ticket_repo, uow,
                                      manager, requester, categoria, relogio):
        _ticket(ticket_repo, requester.id, categoria.id, relogio)
        service = ExcluirCategoriaService(categoria_repo, usuario_repo, ticket_repo, uow)

        with pytest.raises(ConflictError, match="tickets ativos"):
            service.execute(manager.id, categoria.id)

    def test_excluir_com_ticket_inativo(self, categoria_repo, usuario_repo, ticket_repo, uow,
                                        manager, requester, categoria, relogio):
        ticket = _ticket(ticket_repo, requester.id, categoria.id, relogio)
        salvo = ticket_repo.get_by_id(ticket.id)
        salvo.cancelar("duplicado", relogio())
        ticket_repo.save(salvo)

        ExcluirCategoriaService(categoria_repo, usuario_repo, ticket_repo, uow).execute(
            manager.id, categoria.id
        )

        assert not categoria_repo.exists(categoria.id)

    def test_excluir_inexistente(self, categoria_repo, usuario_repo, ticket_repo, uow, manager):
        with pytest.raises(EntityNotFoundError):
            ExcluirCategoriaService(categoria_repo, usuario_repo, ticket_repo, uow).execute(
                manager.id, "nao-existe"
            )

    def test_listar_e_obter(self, criar_categoria, categoria_repo, manager, categoria, outra_categoria):
        filha = criar_categoria.execute(CriarCategoriaInputDTO(manager.id, "Firewall", categoria.id))

        todas = ListarCategoriasService(categoria_repo).execute()
        filhas = ListarCategoriasService(categoria_repo).execute(parent_id=categoria.id)
        por_nome = ListarCategoriasService(categoria_repo).execute(nome="rede")

        assert [c.nome for c in todas] == ["Firewall", "Infraestrutura", "Redes"]
        assert [c.id for c in filhas] == [filha.id]
        assert [c.id for c in por_nome] == [outra_categoria.id]
        assert ObterCategoriaService(categoria_repo).execute(filha.id).nome_exibicao == (
            "Infraestrutura - Firewall"
        )


class TestUsuarios:

    def test_criar_usuario(self, criar_usuario, manager):
        output = criar_usuario.execute(
            CriarUsuarioInputDTO(manager.id, "Frank Harris", " frank.harris@acme.com ", "agent")
        )

        assert output.email == "frank.harris@acme.com"
        assert output.papel == "Agent"

    def test_email_duplicado(self, criar_usuario, manager, requester):
        with pytest.raises(ConflictError):
            criar_usuario.execute(
                CriarUsuarioInputDTO(manager.id, "Outra Alice", "ALICE.JOHNSON@acme.com", "Requester")
            )

    @pytest.mark.parametrize("email", ["", "sem-arroba", "a@b"])
    def test_email_invalido(self, criar_usuario, manager, email):
        with pytest.raises(ValidationError):
            criar_usuario.execute(CriarUsuarioInputDTO(manager.id, "Nome", email, "Requester"))

    def test_papel_invalido(self, criar_usuario, manager):
        with pytest.raises(ValidationError, match="Role inválida"):
            criar_usuario.execute(CriarUsuarioInputDTO(manager.id, "Nome", "n@acme.com", "Admin"))

    def test_requester_nao_cria(self, criar_usuario, requester):
        with pytest.raises(ForbiddenError):
            criar_usuario.execute(CriarUsuarioInputDTO(requester.id, "Nome", "n@acme.com", "Agent"))

    def test_atualizar_papel(self, usuario_repo, uow, manager, requester):
        output = AtualizarUsuarioService(usuario_repo, uow).execute(
            AtualizarUsuarioInputDTO(manager.id, requester.id, papel="Agent")
        )

        assert output.papel == "Agent"
        assert usuario_repo.get_by_id(requester.id).papel == UserRole.AGENT

    def test_atualizar_email_de_outro(self, usuario_repo, uow, manager, requester, agent):
        with pytest.raises(ConflictError):
            AtualizarUsuarioService(usuario_repo, uow).execute(
                AtualizarUsuarioInputDTO(manager.id, requester.id, email=agent.email)
            )

    def test_atualizar_sem_mudanca(self, usuario_repo, uow, manager, requester):
        with pytest.raises(ValidationError, match="Nenhuma alteração"):
            AtualizarUsuarioService(usuario_repo, uow).execute(
                AtualizarUsuarioInputDTO(manager.id, requester.id, nome="Alice Johnson")
            )

    def test_excluir_bloqueado_como_agent(self, usuario_repo, ticket_repo, uow, manager,
                                          requester, agent, categoria, relogio):
        _ticket(ticket_repo, requester.id, categoria.id, relogio, responsavel=agent)

        with pytest.raises(ConflictError, match="como agent"):
            ExcluirUsuarioService(usuario_repo, ticket_repo, uow).execute(manager.id, agent.id)

    def test_excluir_bloqueado_como_requester(self, usuario_repo, ticket_repo, uow, manager,
                                              requester, categoria, relogio):
        _ticket(ticket_repo, requester.id, categoria.id, relogio)

        with pytest.raises(ConflictError, match="como requester"):
            ExcluirUsuarioService(usuario_repo, ticket_repo, uow).execute(manager.id, requester.id)

    def test_excluir_livre(self, usuario_repo, ticket_repo, uow, manager, outro_requester):
        ExcluirUsuarioService(usuario_repo, ticket_repo, uow).execute(manager.id, outro_requester.id)

        with pytest.raises(EntityNotFoundError):
            ObterUsuarioService(usuario_repo).execute(outro_requester.id)

    def test_listar_por_papel(self, usuario_repo, manager, agent, outro_agent, requester):
        agents = ListarUsuariosService(usuario_repo).execute(papel="Agent")

        assert [u.nome for u in agents] == ["Bob Miller", "Eva Martins"]
