"""
Testes da API JSON.

Testa:
- Envelope {success, data, error, meta}
- Identidade via header X-User-Id (401 sem ele)
- Mapeamento de erros de domínio para status HTTP
- Fluxo de tickets, comentários, anexos e cadastros
"""

from datetime import datetime, timedelta

from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
import pytest

from src.adapters.django_app.tickets.models import TicketAcaoModel, TicketComentarioModel


@pytest.fixture
def criar_ticket(api, requester, categoria):
    def _criar(titulo="Impressora offline", prioridade="Alta", ator=None):
        response = api.post("/api/tickets/", ator or requester, {
            "titulo": titulo,
            "descricao": "Não imprime desde ontem",
            "prioridade": prioridade,
            "categoria_id": categoria.id,
        })
        assert response.status_code == 201, response.json()
        return response.json()["data"]
    return _criar


@pytest.fixture
def ticket_atribuido(api, criar_ticket, manager, agent):
    ticket = criar_ticket()
    response = api.post(f"/api/tickets/{ticket['id']}/atribuir/", manager, {"agente_id": agent.id})
    assert response.status_code == 200
    mail.outbox.clear()
    return response.json()["data"]


class TestIdentidadeEErros:

    def test_sem_header(self, api, categoria):
        response = api.post("/api/tickets/", data={"titulo": "x"})

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_usuario_desconhecido(self, client, db):
        response = client.get("/api/tickets/nao-existe/", HTTP_X_USER_ID="fantasma")

        assert response.status_code == 401

    def test_json_invalido(self, client, requester):
        response = client.post(
            "/api/tickets/", data="{nao é json", content_type="application/json",
            HTTP_X_USER_ID=requester.id,
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("JSON inválido")

    def test_ticket_inexistente(self, api, requester):
        response = api.get("/api/tickets/nao-existe/", requester)

        assert response.status_code == 404
        assert response.json()["meta"]["code"] == "ENTITY_NOT_FOUND"

    def test_health(self, client):
        assert client.get("/health/").json() == {"status": "ok"}


class TestCriarTicket:

    def test_criar(self, api, criar_ticket, requester, categoria):
        ticket = criar_ticket()

        assert ticket["status"] == "Novo"
        assert ticket["prioridade"] == "Alta"
        assert ticket["solicitante"] == {"id": requester.id, "nome": "Alice Johnson"}
        assert ticket["categoria"]["nome"] == "Infraestrutura"
        assert ticket["responsavel"]["id"] is None
        assert TicketAcaoModel.objects.get(ticket_id=ticket["id"]).descricao == (
            "Chamado criado por Alice Johnson."
        )
        assert mail.outbox == []

    def test_agent_nao_cria(self, api, agent, categoria):
        response = api.post("/api/tickets/", agent, {
            "titulo": "x", "descricao": "y", "prioridade": "Baixa", "categoria_id": categoria.id,
        })

        assert response.status_code == 403

    def test_sem_categoria(self, api, requester):
        response = api.post("/api/tickets/", requester, {
            "titulo": "x", "descricao": "y", "prioridade": "Baixa",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "Categoria é obrigatória."
        assert response.json()["meta"]["field"] == "categoria_id"

    def test_prioridade_invalida(self, api, requester, categoria):
        response = api.post("/api/tickets/", requester, {
            "titulo": "x", "descricao": "y", "prioridade": "Urgentíssima", "categoria_id": categoria.id,
        })

        assert response.status_code == 400


class TestFluxoDoTicket:

    def test_atribuir_notifica(self, api, criar_ticket, manager, agent):
        ticket = criar_ticket()

        response = api.post(f"/api/tickets/{ticket['id']}/atribuir/", manager, {"agente_id": agent.id})

        data = response.json()["data"]
        assert data["status"] == "Em Análise"
        assert data["responsavel"]["nome"] == "Bob Miller"
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["alice.johnson@acme.com", "bob.miller@acme.com"]
        assert "Chamado atribuído para agent Bob Miller por Clara Thompson." in mail.outbox[0].subject

    def test_atribuir_a_nao_agent(self, api, criar_ticket, manager, outro_requester):
        ticket = criar_ticket()

        response = api.post(
            f"/api/tickets/{ticket['id']}/atribuir/", manager, {"agente_id": outro_requester.id}
        )

        assert response.status_code == 400
        assert response.json()["meta"]["rule"] == "responsavel_deve_ser_agent"

    def test_outro_requester_nao_atribui(self, api, criar_ticket, outro_requester, agent):
        ticket = criar_ticket()

        response = api.post(
            f"/api/tickets/{ticket['id']}/atribuir/", outro_requester, {"agente_id": agent.id}
        )

        assert response.status_code == 403

    def test_fluxo_principal(self, api, ticket_atribuido, agent, requester):
        url = f"/api/tickets/{ticket_atribuido['id']}/status/"

        assert api.post(url, agent, {"status": "Em Andamento"}).json()["data"]["status"] == "Em Andamento"
        assert api.post(url, agent, {"status": "Resolvido"}).json()["data"]["status"] == "Resolvido"
        fechado = api.post(url, requester, {"status": "Fechado"}).json()["data"]

        assert fechado["status"] == "Fechado"
        assert fechado["fechado_em"] is not None
        assert len(mail.outbox) == 3

    def test_reabrir_reinicia_sla(self, api, ticket_atribuido, agent, requester):
        url = f"/api/tickets/{ticket_atribuido['id']}/"
        api.post(f"{url}status/", agent, {"status": "Em Andamento"})
        api.post(f"{url}status/", agent, {"status": "Resolvido"})

        reaberto = api.post(f"{url}reabrir/", requester, {"motivo": "Voltou a falhar"}).json()["data"]

        inicio = datetime.fromisoformat(reaberto["sla_inicio_em"])
        assert reaberto["status"] == "Em Análise"
        assert inicio > datetime.fromisoformat(ticket_atribuido["sla_inicio_em"])
        assert datetime.fromisoformat(reaberto["sla_prazo"]) - inicio == timedelta(hours=24)

        detalhe = api.get(url, agent).json()["data"]
        assert detalhe["comentarios"][0]["mensagem"] == "Chamado reaberto: Voltou a falhar"
        assert detalhe["acoes"][0]["descricao"] == "Chamado reaberto por Alice Johnson."

    def test_transicao_por_quem_nao_pode(self, api, ticket_atribuido, requester):
        response = api.post(
            f"/api/tickets/{ticket_atribuido['id']}/status/", requester, {"status": "Em Andamento"}
        )

        assert response.status_code == 403

    def test_transicao_invalida(self, api, ticket_atribuido, agent):
        response = api.post(
            f"/api/tickets/{ticket_atribuido['id']}/status/", agent, {"status": "Fechado"}
        )

        assert response.status_code == 400
        assert mail.outbox == []

    def test_atualizar_gera_uma_acao_por_campo(self, api, criar_ticket, requester, outra_categoria):
        ticket = criar_ticket()

        response = api.patch(f"/api/tickets/{ticket['id']}/", requester, {
            "titulo": "Impressora do 3º andar offline",
            "prioridade": "Crítica",
            "categoria_id": outra_categoria.id,
        })

        assert response.status_code == 200
        assert response.json()["data"]["categoria"]["nome"] == "Redes"
        assert TicketAcaoModel.objects.filter(ticket_id=ticket["id"]).count() == 4
        assert len(mail.outbox) == 3

    def test_atualizar_sem_mudanca(self, api, criar_ticket, requester):
        ticket = criar_ticket()

        response = api.patch(f"/api/tickets/{ticket['id']}/", requester, {"titulo": ticket["titulo"]})

        assert response.status_code == 400
        assert response.json()["error"] == "Nenhuma alteração detectada."

    def test_cancelar_com_motivo(self, api, criar_ticket, requester):
        ticket = criar_ticket()

        response = api.post(f"/api/tickets/{ticket['id']}/cancelar/", requester, {"motivo": "Resolvido sozinho"})

        assert response.json()["data"]["status"] == "Cancelado"
        interno = TicketComentarioModel.objects.get(ticket_id=ticket["id"])
        assert interno.visibilidade == "Interno"
        assert interno.mensagem == "Chamado cancelado: Resolvido sozinho"

    def test_cancelar_sem_motivo(self, api, criar_ticket, requester):
        ticket = criar_ticket()

        response = api.post(f"/api/tickets/{ticket['id']}/cancelar/", requester, {"motivo": "  "})

        assert response.status_code == 400

    def test_alterar_solicitante(self, api, criar_ticket, manager, outro_requester):
        ticket = criar_ticket()

        response = api.post(
            f"/api/tickets/{ticket['id']}/solicitante/", manager, {"solicitante_id": outro_requester.id}
        )

        assert response.json()["data"]["solicitante"]["nome"] == "Diego Souza"
        assert mail.outbox[0].to == ["diego.souza@acme.com"]


class TestListarTickets:

    def test_paginacao(self, api, criar_ticket, requester):
        for i in range(3):
            criar_ticket(titulo=f"Chamado {i}")

        response = api.get("/api/tickets/", requester, {"por_pagina": 2})

        body = response.json()
        assert [t["titulo"] for t in body["data"]] == ["Chamado 2", "Chamado 1"]
        assert body["meta"] == {
            "total": 3,
            "pagina": 1,
            "por_pagina": 2,
            "total_paginas": 2,
            "tem_proxima": True,
            "tem_anterior": False,
        }

    def test_por_pagina_limitado(self, api, requester):
        response = api.get("/api/tickets/", requester, {"por_pagina": 500})

        assert response.json()["meta"]["por_pagina"] == 100

    def test_filtros(self, api, criar_ticket, requester):
        criar_ticket(titulo="Servidor caiu", prioridade="Crítica")
        criar_ticket(titulo="Mouse", prioridade="Baixa")

        response = api.get("/api/tickets/", requester, {"prioridade": "Crítica"})

        assert [t["titulo"] for t in response.json()["data"]] == ["Servidor caiu"]

    @pytest.mark.parametrize("params", [
        {"status": "Arquivado"},
        {"pagina": "zero"},
        {"criado_de": "ontem"},
    ])
    def test_parametros_invalidos(self, api, requester, params):
        assert api.get("/api/tickets/", requester, params).status_code == 400


class TestComentarios:

    def test_visibilidade(self, api, ticket_atribuido, agent, outro_requester):
        url = f"/api/tickets/{ticket_atribuido['id']}/comentarios/"

        publico = api.post(url, outro_requester, {"mensagem": "Também estou com esse problema"})
        interno = api.post(url, agent, {"mensagem": "Driver corrompido", "visibilidade": "Interno"})

        assert publico.status_code == 201
        assert interno.status_code == 201
        assert [c["visibilidade"] for c in api.get(url, agent).json()["data"]] == ["Interno", "Público"]
        assert [c["visibilidade"] for c in api.get(url, outro_requester).json()["data"]] == ["Público"]
        assert mail.outbox == []

    def test_interno_por_nao_participante(self, api, ticket_atribuido, outro_requester):
        response = api.post(
            f"/api/tickets/{ticket_atribuido['id']}/comentarios/",
            outro_requester, {"mensagem": "x", "visibilidade": "Interno"},
        )

        assert response.status_code == 403

    def test_editar_e_excluir(self, api, ticket_atribuido, requester, agent):
        url = f"/api/tickets/{ticket_atribuido['id']}/comentarios/"
        comentario = api.post(url, requester, {"mensagem": "Reiniciei e nada"}).json()["data"]
        detalhe = f"{url}{comentario['id']}/"

        assert api.put(detalhe, agent, {"mensagem": "x"}).status_code == 403

        editado = api.put(detalhe, requester, {"mensagem": "Reiniciei duas vezes"}).json()["data"]
        assert editado["mensagem"] == "editado: Reiniciei duas vezes"

        assert api.delete(detalhe, requester).status_code == 200
        assert api.get(detalhe, requester).status_code == 404


class TestAnexos:

    def _upload(self, client, ticket_id, ator, nome="log.txt", conteudo=b"erro 42"):
        return client.post(
            f"/api/tickets/{ticket_id}/anexos/",
            {"arquivo": SimpleUploadedFile(nome, conteudo, content_type="text/plain")},
            HTTP_X_USER_ID=ator.id,
        )

    def test_upload_listar_excluir(self, api, client, criar_ticket, requester, manager):
        ticket = criar_ticket()

        response = self._upload(client, ticket["id"], requester)

        assert response.status_code == 201
        anexo = response.json()["data"]
        assert anexo["nome_arquivo"] == "log.txt"
        assert anexo["tamanho_bytes"] == 7
        assert anexo["url_publica"].endswith(f"tickets/{ticket['id']}/log.txt")

        url = f"/api/tickets/{ticket['id']}/anexos/"
        assert [a["id"] for a in api.get(url, requester).json()["data"]] == [anexo["id"]]
        assert api.delete(f"{url}{anexo['id']}/", manager).status_code == 403
        assert api.delete(f"{url}{anexo['id']}/", requester).status_code == 200
        assert api.get(url, requester).json()["data"] == []

    def test_extensao_proibida(self, client, criar_ticket, requester):
        ticket = criar_ticket()

        response = self._upload(client, ticket["id"], requester, nome="instalar.exe")

        assert response.status_code == 400
        assert response.json()["error"] == "Extensão proibida."

    def test_sem_arquivo(self, client, criar_ticket, requester):
        ticket = criar_ticket()

        response = client.post(f"/api/tickets/{ticket['id']}/anexos/", {}, HTTP_X_USER_ID=requester.id)

        assert response.status_code == 400

    def test_detalhe_do_ticket(self, api, client, criar_ticket, requester):
        ticket = criar_ticket()
        self._upload(client, ticket["id"], requester)

        detalhe = api.get(f"/api/tickets/{ticket['id']}/", requester).json()["data"]

        assert len(detalhe["anexos"]) == 1
        assert [a["descricao"] for a in detalhe["acoes"]] == ["Chamado criado por Alice Johnson."]


class TestCadastros:

    def test_categorias(self, api, manager, agent, categoria):
        criada = api.post("/api/categorias/", manager, {"nome": "Wi-Fi", "parent_id": categoria.id})

        assert criada.status_code == 201
        assert criada.json()["data"]["nome_exibicao"] == "Infraestrutura - Wi-Fi"
        assert api.post("/api/categorias/", agent, {"nome": "Hardware"}).status_code == 403
        assert api.post("/api/categorias/", manager, {"nome": "wi-fi"}).status_code == 409

        filhas = api.get(f"/api/categorias/?parent_id={categoria.id}").json()["data"]
        assert [c["nome"] for c in filhas] == ["Wi-Fi"]

    def test_excluir_categoria_com_ticket_ativo(self, api, criar_ticket, manager, categoria):
        criar_ticket()

        response = api.delete(f"/api/categorias/{categoria.id}/", manager)

        assert response.status_code == 409
        assert response.json()["error"] == "Categoria está associada a tickets ativos."

    def test_usuarios(self, api, manager, agent, outro_agent):
        criado = api.post("/api/usuarios/", manager, {
            "nome": "Frank Harris", "email": "frank.harris@acme.com", "papel": "agent",
        })

        assert criado.status_code == 201
        agents = api.get("/api/usuarios/", data={"papel": "Agent"}).json()["data"]
        assert [u["nome"] for u in agents] == ["Bob Miller", "Eva Martins", "Frank Harris"]

    def test_atualizar_e_excluir_usuario(self, api, manager, outro_requester):
        url = f"/api/usuarios/{outro_requester.id}/"

        assert api.patch(url, manager, {"papel": "Agent"}).json()["data"]["papel"] == "Agent"
        assert api.delete(url, manager).status_code == 200
        assert api.get(url).status_code == 404

    def test_excluir_usuario_com_ticket_ativo(self, api, criar_ticket, manager, requester):
        criar_ticket()

        response = api.delete(f"/api/usuarios/{requester.id}/", manager)

        assert response.status_code == 409
