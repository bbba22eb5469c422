"""
API Views JSON do HelpDesk.

DRIVING ADAPTER: traduz HTTP para chamadas aos Use Cases.

Identidade:
- Header `X-User-Id` (id de usuário do diretório), repassado como
  `ator_id`. Header ausente ou desconhecido resulta em 401.

Formato:
- Entrada: JSON (anexos: multipart, campo `arquivo`)
- Saída: JSON com estrutura {success, data/error, meta}

Erros:
- A categoria da exceção de domínio define o status HTTP
  (404, 401, 403, 400, 409); erro inesperado vira 500.
"""

from typing import Any, Dict, Optional
import json
import logging

from django.http import HttpRequest, JsonResponse
from django.utils.dateparse import parse_datetime
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.core.cadastros.dtos import (
    AtualizarUsuarioInputDTO,
    CriarCategoriaInputDTO,
    CriarUsuarioInputDTO,
)
from src.core.shared.exceptions import DomainException, ValidationError
from src.core.tickets.dtos import (
    AlterarSolicitanteInputDTO,
    AlterarStatusInputDTO,
    AtribuirTicketInputDTO,
    AtualizarTicketInputDTO,
    CriarComentarioInputDTO,
    CriarTicketInputDTO,
    EditarComentarioInputDTO,
    ListarTicketsQueryDTO,
    MotivoInputDTO,
    RegistrarAnexoInputDTO,
)
from src.config.container import get_container

logger = logging.getLogger(__name__)

HEADER_USUARIO = 'X-User-Id'

STATUS_POR_CATEGORIA = {
    'not_found': 404,
    'unauthorized': 401,
    'forbidden': 403,
    'invalid': 400,
    'conflict': 409,
}


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status, json_dumps_params={'ensure_ascii': False})


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValidationError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValidationError("JSON inválido: esperado um objeto.")
    return data


def get_ator_id(request: HttpRequest) -> Optional[str]:
    """Identificador do chamador (header X-User-Id)."""
    valor = (request.headers.get(HEADER_USUARIO) or '').strip()
    return valor or None


def _query_datetime(request: HttpRequest, nome: str):
    valor = request.GET.get(nome)
    if not valor:
        return None
    try:
        data = parse_datetime(valor)
    except ValueError:
        data = None
    if data is None:
        raise ValidationError(f"Data inválida em '{nome}'.", field=nome)
    return data


def _query_int(request: HttpRequest, nome: str, padrao: int) -> int:
    valor = request.GET.get(nome)
    if not valor:
        return padrao
    try:
        numero = int(valor)
    except ValueError:
        raise ValidationError(f"Valor inválido em '{nome}'.", field=nome)
    if numero < 1:
        raise ValidationError(f"'{nome}' deve ser maior que zero.", field=nome)
    return numero


def _query_bool(request: HttpRequest, nome: str) -> bool:
    return (request.GET.get(nome) or '').lower() in ('true', '1', 'yes', 'sim')


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except Exception as e:
            return self.handle_exception(e)

    def get_service(self, service_name: str):
        """Obtém service do container."""
        return getattr(get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Converte exceção em resposta JSON.

        Exceções de domínio usam o status da sua categoria;
        qualquer outra é logada e vira 500.
        """
        if isinstance(e, DomainException):
            status = STATUS_POR_CATEGORIA.get(e.categoria, 400)
            meta = {'code': e.code}
            for atributo in ('field', 'rule'):
                valor = getattr(e, atributo, None)
                if valor:
                    meta[atributo] = valor
            return json_response(success=False, error=e.message, status=status, meta=meta)

        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )


# =============================================================================
# Tickets
# =============================================================================

class TicketAPIListView(BaseAPIView):
    """
    GET /api/tickets/ - Lista tickets (filtros + paginação)
    POST /api/tickets/ - Cria ticket
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Query params:
        - status, prioridade, titulo
        - criado_de, criado_ate, prazo_de, prazo_ate (ISO 8601)
        - solicitante_id, responsavel_id, categoria_id
        - apenas_atrasados (true/false)
        - pagina (default: 1), por_pagina (default: 20)
        """
        query = ListarTicketsQueryDTO(
            status=request.GET.get('status') or None,
            prioridade=request.GET.get('prioridade') or None,
            titulo=request.GET.get('titulo') or None,
            criado_de=_query_datetime(request, 'criado_de'),
            criado_ate=_query_datetime(request, 'criado_ate'),
            solicitante_id=request.GET.get('solicitante_id') or None,
            responsavel_id=request.GET.get('responsavel_id') or None,
            categoria_id=request.GET.get('categoria_id') or None,
            prazo_de=_query_datetime(request, 'prazo_de'),
            prazo_ate=_query_datetime(request, 'prazo_ate'),
            apenas_atrasados=_query_bool(request, 'apenas_atrasados'),
            pagina=_query_int(request, 'pagina', 1),
            por_pagina=min(_query_int(request, 'por_pagina', 20), 100),
        )

        resultado = self.get_service('listar_tickets_service').execute(query)
        data = resultado.to_dict()
        items = data.pop('items')
        return json_response(success=True, data=items, meta=data)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "titulo": "string (obrigatório)",
            "descricao": "string (obrigatório)",
            "prioridade": "Baixa|Média|Alta|Crítica (obrigatório)",
            "categoria_id": "string (obrigatório)"
        }
        """
        data = self.parse_body(request)

        output = self.get_service('criar_ticket_service').execute(CriarTicketInputDTO(
            ator_id=get_ator_id(request),
            titulo=data.get('titulo', ''),
            descricao=data.get('descricao', ''),
            prioridade=data.get('prioridade', ''),
            categoria_id=data.get('categoria_id'),
        ))

        logger.info(f"API: Ticket criado: {output.id}")
        return json_response(success=True, data=output.to_dict(), status=201)


class TicketAPIDetailView(BaseAPIView):
    """
    GET /api/tickets/<id>/ - Ticket com comentários visíveis, anexos e histórico
    PATCH /api/tickets/<id>/ - Atualiza título/descrição/prioridade/categoria
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        detalhe = self.get_service('obter_ticket_service').execute(pk, get_ator_id(request))
        return json_response(success=True, data=detalhe.to_dict())

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('atualizar_ticket_service').execute(AtualizarTicketInputDTO(
            ator_id=get_ator_id(request),
            ticket_id=pk,
            titulo=data.get('titulo'),
            descricao=data.get('descricao'),
            prioridade=data.get('prioridade'),
            categoria_id=data.get('categoria_id'),
        ))
        return json_response(success=True, data=output.to_dict())

    put = patch


class TicketAPIAtribuirView(BaseAPIView):
    """POST /api/tickets/<id>/atribuir/ - Body: {"agente_id": "..."}"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('atribuir_ticket_service').execute(AtribuirTicketInputDTO(
            ator_id=get_ator_id(request),
            ticket_id=pk,
            agente_id=data.get('agente_id'),
        ))

        logger.info(f"API: Ticket {pk} atribuído a {output.responsavel_id}")
        return json_response(success=True, data=output.to_dict())


class TicketAPISolicitanteView(BaseAPIView):
    """POST /api/tickets/<id>/solicitante/ - Body: {"solicitante_id": "..."}"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('alterar_solicitante_service').execute(AlterarSolicitanteInputDTO(
            ator_id=get_ator_id(request),
            ticket_id=pk,
            solicitante_id=data.get('solicitante_id'),
        ))
        return json_response(success=True, data=output.to_dict())


class TicketAPIStatusView(BaseAPIView):
    """POST /api/tickets/<id>/status/ - Body: {"status": "Em Andamento"}"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('alterar_status_service').execute(AlterarStatusInputDTO(
            ator_id=get_ator_id(request),
            ticket_id=pk,
            status=data.get('status', ''),
        ))
        return json_response(success=True, data=output.to_dict())


class _TicketMotivoView(BaseAPIView):
    service_name: str = ''

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service(self.service_name).execute(MotivoInputDTO(
            ator_id=get_ator_id(request),
            ticket_id=pk,
            motivo=data.get('motivo'),
        ))
        return json_response(success=True, data=output.to_dict())


class TicketAPIReabrirView(_TicketMotivoView):
    """POST /api/tickets/<id>/reabrir/ - Body: {"motivo": "..."}"""

    service_name = 'reabrir_ticket_service'


class TicketAPICancelarView(_TicketMotivoView):
    """POST /api/tickets/<id>/cancelar/ - Body: {"motivo": "..."}"""

    service_name = 'cancelar_ticket_service'


# =============================================================================
# Comentários
# =============================================================================

class ComentarioAPIListView(BaseAPIView):
    """
    GET /api/tickets/<id>/comentarios/ - Comentários visíveis ao chamador
    POST /api/tickets/<id>/comentarios/ - Body: {"mensagem": "...", "visibilidade": "Público|Interno"}
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        comentarios = self.get_service('listar_comentarios_service').execute(get_ator_id(request), pk)
        return json_response(success=True, data=[c.to_dict() for c in comentarios])

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('criar_comentario_service').execute(CriarComentarioInputDTO(
            ator_id=get_ator_id(request),
            ticket_id=pk,
            mensagem=data.get('mensagem', ''),
            visibilidade=data.get('visibilidade') or 'Público',
        ))
        return json_response(success=True, data=output.to_dict(), status=201)


class ComentarioAPIDetailView(BaseAPIView):
    """
    GET /api/tickets/<id>/comentarios/<cid>/
    PUT /api/tickets/<id>/comentarios/<cid>/ - Body: {"mensagem": "..."}
    DELETE /api/tickets/<id>/comentarios/<cid>/
    """

    def get(self, request: HttpRequest, pk: str, comentario_id: str) -> JsonResponse:
        output = self.get_service('obter_comentario_service').execute(
            get_ator_id(request), pk, comentario_id
        )
        return json_response(success=True, data=output.to_dict())

    def put(self, request: HttpRequest, pk: str, comentario_id: str) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('editar_comentario_service').execute(EditarComentarioInputDTO(
            ator_id=get_ator_id(request),
            ticket_id=pk,
            comentario_id=comentario_id,
            mensagem=data.get('mensagem', ''),
        ))
        return json_response(success=True, data=output.to_dict())

    patch = put

    def delete(self, request: HttpRequest, pk: str, comentario_id: str) -> JsonResponse:
        self.get_service('excluir_comentario_service').execute(
            get_ator_id(request), pk, comentario_id
        )
        return json_response(success=True, data={'id': comentario_id})


# =============================================================================
# Anexos
# =============================================================================

class AnexoAPIListView(BaseAPIView):
    """
    GET /api/tickets/<id>/anexos/
    POST /api/tickets/<id>/anexos/ - multipart/form-data, campo `arquivo`
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        anexos = self.get_service('listar_anexos_service').execute(pk)
        return json_response(success=True, data=[a.to_dict() for a in anexos])

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        arquivo = request.FILES.get('arquivo')

        output = self.get_service('registrar_anexo_service').execute(RegistrarAnexoInputDTO(
            ator_id=get_ator_id(request),
            ticket_id=pk,
            nome_arquivo=arquivo.name if arquivo else '',
            conteudo=arquivo.read() if arquivo else b'',
            content_type=arquivo.content_type if arquivo else None,
        ))
        return json_response(success=True, data=output.to_dict(), status=201)


class AnexoAPIDetailView(BaseAPIView):
    """DELETE /api/tickets/<id>/anexos/<aid>/ - somente quem enviou"""

    def delete(self, request: HttpRequest, pk: str, anexo_id: str) -> JsonResponse:
        self.get_service('excluir_anexo_service').execute(get_ator_id(request), pk, anexo_id)
        return json_response(success=True, data={'id': anexo_id})


# =============================================================================
# Categorias
# =============================================================================

class CategoriaAPIListView(BaseAPIView):
    """
    GET /api/categorias/?nome=&parent_id=
    POST /api/categorias/ - Body: {"nome": "...", "parent_id": "..."} (Manager)
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        categorias = self.get_service('listar_categorias_service').execute(
            nome=request.GET.get('nome') or None,
            parent_id=request.GET.get('parent_id') or None,
        )
        return json_response(success=True, data=[c.to_dict() for c in categorias])

    def post(self, request: HttpRequest) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('criar_categoria_service').execute(CriarCategoriaInputDTO(
            ator_id=get_ator_id(request),
            nome=data.get('nome', ''),
            parent_id=data.get('parent_id'),
        ))
        return json_response(success=True, data=output.to_dict(), status=201)


class CategoriaAPIDetailView(BaseAPIView):
    """GET / DELETE /api/categorias/<id>/"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        output = self.get_service('obter_categoria_service').execute(pk)
        return json_response(success=True, data=output.to_dict())

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        self.get_service('excluir_categoria_service').execute(get_ator_id(request), pk)
        return json_response(success=True, data={'id': pk})


# =============================================================================
# Usuários
# =============================================================================

class UsuarioAPIListView(BaseAPIView):
    """
    GET /api/usuarios/?papel=Agent
    POST /api/usuarios/ - Body: {"nome", "email", "papel"} (Manager)
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        usuarios = self.get_service('listar_usuarios_service').execute(
            papel=request.GET.get('papel') or None
        )
        return json_response(success=True, data=[u.to_dict() for u in usuarios])

    def post(self, request: HttpRequest) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('criar_usuario_service').execute(CriarUsuarioInputDTO(
            ator_id=get_ator_id(request),
            nome=data.get('nome', ''),
            email=data.get('email', ''),
            papel=data.get('papel', ''),
        ))
        return json_response(success=True, data=output.to_dict(), status=201)


class UsuarioAPIDetailView(BaseAPIView):
    """GET / PATCH / DELETE /api/usuarios/<id>/"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        output = self.get_service('obter_usuario_service').execute(pk)
        return json_response(success=True, data=output.to_dict())

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        data = self.parse_body(request)

        output = self.get_service('atualizar_usuario_service').execute(AtualizarUsuarioInputDTO(
            ator_id=get_ator_id(request),
            usuario_id=pk,
            nome=data.get('nome'),
            email=data.get('email'),
            papel=data.get('papel'),
        ))
        return json_response(success=True, data=output.to_dict())

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        self.get_service('excluir_usuario_service').execute(get_ator_id(request), pk)
        return json_response(success=True, data={'id': pk})
