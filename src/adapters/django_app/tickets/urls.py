"""
URL patterns da API JSON do HelpDesk (montadas em /api/).

Tickets:
- GET/POST   tickets/
- GET/PATCH  tickets/<id>/
- POST       tickets/<id>/atribuir/
- POST       tickets/<id>/solicitante/
- POST       tickets/<id>/status/
- POST       tickets/<id>/reabrir/
- POST       tickets/<id>/cancelar/

Comentários e anexos:
- GET/POST         tickets/<id>/comentarios/
- GET/PUT/DELETE   tickets/<id>/comentarios/<cid>/
- GET/POST         tickets/<id>/anexos/
- DELETE           tickets/<id>/anexos/<aid>/

Cadastros:
- GET/POST          categorias/
- GET/DELETE        categorias/<id>/
- GET/POST          usuarios/
- GET/PATCH/DELETE  usuarios/<id>/
"""

from django.urls import path

from . import api_views

app_name = 'helpdesk'

urlpatterns = [
    # Tickets
    path('tickets/', api_views.TicketAPIListView.as_view(), name='tickets'),
    path('tickets/<str:pk>/', api_views.TicketAPIDetailView.as_view(), name='ticket_detail'),
    path('tickets/<str:pk>/atribuir/', api_views.TicketAPIAtribuirView.as_view(), name='ticket_atribuir'),
    path('tickets/<str:pk>/solicitante/', api_views.TicketAPISolicitanteView.as_view(), name='ticket_solicitante'),
    path('tickets/<str:pk>/status/', api_views.TicketAPIStatusView.as_view(), name='ticket_status'),
    path('tickets/<str:pk>/reabrir/', api_views.TicketAPIReabrirView.as_view(), name='ticket_reabrir'),
    path('tickets/<str:pk>/cancelar/', api_views.TicketAPICancelarView.as_view(), name='ticket_cancelar'),

    # Comentários
    path('tickets/<str:pk>/comentarios/', api_views.ComentarioAPIListView.as_view(), name='comentarios'),
    path(
        'tickets/<str:pk>/comentarios/<str:comentario_id>/',
        api_views.ComentarioAPIDetailView.as_view(),
        name='comentario_detail',
    ),

    # Anexos
    path('tickets/<str:pk>/anexos/', api_views.AnexoAPIListView.as_view(), name='anexos'),
    path(
        'tickets/<str:pk>/anexos/<str:anexo_id>/',
        api_views.AnexoAPIDetailView.as_view(),
        name='anexo_detail',
    ),

    # Cadastros
    path('categorias/', api_views.CategoriaAPIListView.as_view(), name='categorias'),
    path('categorias/<str:pk>/', api_views.CategoriaAPIDetailView.as_view(), name='categoria_detail'),
    path('usuarios/', api_views.UsuarioAPIListView.as_view(), name='usuarios'),
    path('usuarios/<str:pk>/', api_views.UsuarioAPIDetailView.as_view(), name='usuario_detail'),
]
