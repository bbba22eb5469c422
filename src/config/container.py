"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, publisher)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: valores vindos do settings do Django

Importado somente depois do setup do Django (views, tasks), pois
os repositórios dependem dos models.
"""

from typing import Optional

from dependency_injector import containers, providers
from django.conf import settings

from src.core.cadastros import use_cases as cadastros
from src.core.tickets import anexos, comentarios, use_cases as tickets
from src.core.tickets.events import TicketAcaoRegistradaEvent
from src.core.tickets.monitor import MonitorSLA

from src.adapters.django_app.events.handlers import notificar_acao_registrada
from src.adapters.django_app.events.publishers import LoggingEventPublisher, get_event_publisher
from src.adapters.django_app.notifications.services import (
    EmailNotificationDispatcher,
    EmailService,
)
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork
from src.adapters.django_app.tickets.repositories import (
    DjangoAnexoRepository,
    DjangoCategoriaRepository,
    DjangoComentarioRepository,
    DjangoTicketAcaoRepository,
    DjangoTicketRepository,
    DjangoUsuarioRepository,
)
from src.adapters.django_app.tickets.storage import DjangoFileStorage


def build_event_publisher(mode: str, dispatcher):
    """
    Cria o publisher do modo configurado.

    No modo síncrono a notificação roda no próprio processo, logo
    após o commit; no modo celery, o worker chama o mesmo handler.
    """
    publisher = get_event_publisher(mode)
    if isinstance(publisher, LoggingEventPublisher):
        publisher.register_handler(
            TicketAcaoRegistradaEvent.__name__,
            lambda event: notificar_acao_registrada(event, dispatcher),
        )
    return publisher


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: settings do Django
    - Repositories: Persistência
    - Infrastructure: Storage, e-mail, publisher
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        container = get_container()
        service = container.criar_ticket_service()
        result = service.execute(input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    ticket_repository = providers.Singleton(DjangoTicketRepository)
    acao_repository = providers.Singleton(DjangoTicketAcaoRepository)
    comentario_repository = providers.Singleton(DjangoComentarioRepository)
    anexo_repository = providers.Singleton(DjangoAnexoRepository)
    usuario_repository = providers.Singleton(DjangoUsuarioRepository)
    categoria_repository = providers.Singleton(DjangoCategoriaRepository)

    # =========================================================================
    # Infrastructure
    # =========================================================================

    file_storage = providers.Singleton(DjangoFileStorage)

    email_service = providers.Singleton(
        EmailService,
        desabilitar_envio=config.email.desabilitar_envio,
    )

    notification_dispatcher = providers.Singleton(
        EmailNotificationDispatcher,
        ticket_repo=ticket_repository,
        usuario_repo=usuario_repository,
        categoria_repo=categoria_repository,
        email_service=email_service,
    )

    event_publisher = providers.Singleton(
        build_event_publisher,
        mode=config.event_publisher_mode,
        dispatcher=notification_dispatcher,
    )

    monitor_sla = providers.Factory(
        MonitorSLA,
        ticket_repo=ticket_repository,
        dispatcher=notification_dispatcher,
        limiar=config.sla.limiar,
        intervalo=config.sla.intervalo,
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        DjangoUnitOfWork,
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services - Tickets
    # =========================================================================

    _lifecycle = dict(
        ticket_repo=ticket_repository,
        acao_repo=acao_repository,
        usuario_repo=usuario_repository,
        categoria_repo=categoria_repository,
        uow=unit_of_work,
    )

    criar_ticket_service = providers.Factory(tickets.CriarTicketService, **_lifecycle)
    atualizar_ticket_service = providers.Factory(tickets.AtualizarTicketService, **_lifecycle)
    atribuir_ticket_service = providers.Factory(tickets.AtribuirTicketService, **_lifecycle)
    alterar_solicitante_service = providers.Factory(tickets.AlterarSolicitanteService, **_lifecycle)
    alterar_status_service = providers.Factory(tickets.AlterarStatusService, **_lifecycle)

    reabrir_ticket_service = providers.Factory(
        tickets.ReabrirTicketService,
        comentario_repo=comentario_repository,
        **_lifecycle,
    )
    cancelar_ticket_service = providers.Factory(
        tickets.CancelarTicketService,
        comentario_repo=comentario_repository,
        **_lifecycle,
    )

    # Leitura (sem UoW)
    obter_ticket_service = providers.Factory(
        tickets.ObterTicketService,
        ticket_repo=ticket_repository,
        acao_repo=acao_repository,
        comentario_repo=comentario_repository,
        anexo_repo=anexo_repository,
        usuario_repo=usuario_repository,
        categoria_repo=categoria_repository,
    )
    listar_tickets_service = providers.Factory(
        tickets.ListarTicketsService,
        ticket_repo=ticket_repository,
        usuario_repo=usuario_repository,
        categoria_repo=categoria_repository,
    )

    # =========================================================================
    # Services - Comentários
    # =========================================================================

    _comentarios = dict(
        ticket_repo=ticket_repository,
        comentario_repo=comentario_repository,
        usuario_repo=usuario_repository,
    )

    criar_comentario_service = providers.Factory(
        comentarios.CriarComentarioService, uow=unit_of_work, **_comentarios
    )
    editar_comentario_service = providers.Factory(
        comentarios.EditarComentarioService, uow=unit_of_work, **_comentarios
    )
    excluir_comentario_service = providers.Factory(
        comentarios.ExcluirComentarioService, uow=unit_of_work, **_comentarios
    )
    listar_comentarios_service = providers.Factory(comentarios.ListarComentariosService, **_comentarios)
    obter_comentario_service = providers.Factory(comentarios.ObterComentarioService, **_comentarios)

    # =========================================================================
    # Services - Anexos
    # =========================================================================

    registrar_anexo_service = providers.Factory(
        anexos.RegistrarAnexoService,
        ticket_repo=ticket_repository,
        anexo_repo=anexo_repository,
        usuario_repo=usuario_repository,
        storage=file_storage,
        uow=unit_of_work,
        tamanho_maximo=config.anexos.tamanho_maximo,
        extensoes_bloqueadas=config.anexos.extensoes_bloqueadas,
    )
    excluir_anexo_service = providers.Factory(
        anexos.ExcluirAnexoService,
        ticket_repo=ticket_repository,
        anexo_repo=anexo_repository,
        usuario_repo=usuario_repository,
        storage=file_storage,
        uow=unit_of_work,
    )
    listar_anexos_service = providers.Factory(
        anexos.ListarAnexosService,
        ticket_repo=ticket_repository,
        anexo_repo=anexo_repository,
    )

    # =========================================================================
    # Services - Cadastros
    # =========================================================================

    criar_categoria_service = providers.Factory(
        cadastros.CriarCategoriaService,
        categoria_repo=categoria_repository,
        usuario_repo=usuario_repository,
        uow=unit_of_work,
    )
    excluir_categoria_service = providers.Factory(
        cadastros.ExcluirCategoriaService,
        categoria_repo=categoria_repository,
        usuario_repo=usuario_repository,
        tickets_ativos=ticket_repository,
        uow=unit_of_work,
    )
    listar_categorias_service = providers.Factory(
        cadastros.ListarCategoriasService, categoria_repo=categoria_repository
    )
    obter_categoria_service = providers.Factory(
        cadastros.ObterCategoriaService, categoria_repo=categoria_repository
    )

    criar_usuario_service = providers.Factory(
        cadastros.CriarUsuarioService, usuario_repo=usuario_repository, uow=unit_of_work
    )
    atualizar_usuario_service = providers.Factory(
        cadastros.AtualizarUsuarioService, usuario_repo=usuario_repository, uow=unit_of_work
    )
    excluir_usuario_service = providers.Factory(
        cadastros.ExcluirUsuarioService,
        usuario_repo=usuario_repository,
        tickets_ativos=ticket_repository,
        uow=unit_of_work,
    )
    obter_usuario_service = providers.Factory(
        cadastros.ObterUsuarioService, usuario_repo=usuario_repository
    )
    listar_usuarios_service = providers.Factory(
        cadastros.ListarUsuariosService, usuario_repo=usuario_repository
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def _settings_dict() -> dict:
    return {
        "event_publisher_mode": getattr(settings, "EVENT_PUBLISHER_MODE", "sync"),
        "sla": {
            "limiar": settings.SLA_ALERTA_LIMIAR,
            "intervalo": settings.SLA_MONITOR_INTERVAL_SECONDS,
        },
        "anexos": {
            "tamanho_maximo": settings.HELPDESK_ANEXO_MAX_BYTES,
            "extensoes_bloqueadas": frozenset(settings.HELPDESK_ANEXO_EXTENSOES_BLOQUEADAS),
        },
        "email": {
            "desabilitar_envio": settings.HELPDESK_EMAIL_DISABLE_DELIVERY,
        },
    }


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization), carregando a
    configuração do settings do Django.
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(_settings_dict())

    return _container


def reset_container() -> None:
    """Reset do container (para testes)."""
    global _container
    _container = None
