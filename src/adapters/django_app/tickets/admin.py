"""
Django Admin para o HelpDesk.

Tickets e histórico ficam somente leitura: mudanças de estado
passam pelos Use Cases, que gravam auditoria e notificam.
Usuários e categorias podem ser editados aqui.
"""

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from .models import (
    STATUS_INATIVOS,
    AnexoModel,
    CategoriaModel,
    TicketAcaoModel,
    TicketComentarioModel,
    TicketModel,
    UsuarioModel,
)

CORES_STATUS = {
    'Novo': '#17a2b8',
    'Em Análise': '#6f42c1',
    'Em Andamento': '#ffc107',
    'Resolvido': '#28a745',
    'Fechado': '#343a40',
    'Cancelado': '#6c757d',
}

CORES_PRIORIDADE = {
    'Baixa': '#28a745',
    'Média': '#ffc107',
    'Alta': '#fd7e14',
    'Crítica': '#dc3545',
}


def _badge(cor: str, texto: str):
    return format_html(
        '<span style="background-color: {}; color: white; padding: 3px 8px; '
        'border-radius: 3px; font-size: 11px;">{}</span>',
        cor,
        texto,
    )


class TicketAcaoInline(admin.TabularInline):
    model = TicketAcaoModel
    extra = 0
    can_delete = False
    fields = ['criado_em', 'descricao']
    readonly_fields = fields


class TicketComentarioInline(admin.TabularInline):
    model = TicketComentarioModel
    extra = 0
    can_delete = False
    fields = ['criado_em', 'autor', 'visibilidade', 'mensagem']
    readonly_fields = fields


class AnexoInline(admin.TabularInline):
    model = AnexoModel
    extra = 0
    can_delete = False
    fields = ['enviado_em', 'autor', 'nome_arquivo', 'tamanho_bytes', 'url_publica']
    readonly_fields = fields


@admin.register(TicketModel)
class TicketAdmin(admin.ModelAdmin):
    list_display = [
        'id_curto',
        'titulo',
        'status_badge',
        'prioridade_badge',
        'categoria',
        'solicitante',
        'responsavel',
        'criado_em',
        'sla_status',
    ]

    list_filter = ['status', 'prioridade', 'categoria', 'criado_em']

    search_fields = ['id', 'titulo', 'descricao', 'solicitante__nome', 'responsavel__nome']

    list_select_related = ['categoria', 'solicitante', 'responsavel']

    readonly_fields = [
        'id',
        'status',
        'prioridade',
        'solicitante',
        'responsavel',
        'categoria',
        'criado_em',
        'atribuido_em',
        'fechado_em',
        'sla_inicio_em',
        'sla_prazo',
        'versao',
    ]

    fieldsets = [
        ('Identificação', {
            'fields': ['id', 'titulo', 'descricao', 'categoria'],
        }),
        ('Status', {
            'fields': ['status', 'prioridade', 'sla_inicio_em', 'sla_prazo'],
        }),
        ('Responsáveis', {
            'fields': ['solicitante', 'responsavel'],
        }),
        ('Timestamps', {
            'fields': ['criado_em', 'atribuido_em', 'fechado_em', 'versao'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [TicketAcaoInline, TicketComentarioInline, AnexoInline]

    ordering = ['-criado_em']

    date_hierarchy = 'criado_em'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    @admin.display(description='ID')
    def id_curto(self, obj):
        return obj.id[:8] + '...'

    @admin.display(description='Status')
    def status_badge(self, obj):
        return _badge(CORES_STATUS.get(obj.status, '#6c757d'), obj.status)

    @admin.display(description='Prioridade')
    def prioridade_badge(self, obj):
        return _badge(CORES_PRIORIDADE.get(obj.prioridade, '#6c757d'), obj.prioridade)

    @admin.display(description='SLA')
    def sla_status(self, obj):
        if not obj.sla_prazo:
            return '-'

        if obj.status in STATUS_INATIVOS:
            return format_html('<span style="color: #6c757d;">{}</span>', obj.status)

        if timezone.now() > obj.sla_prazo:
            return mark_safe('<span style="color: #dc3545; font-weight: bold;">⚠ Atrasado</span>')

        return mark_safe('<span style="color: #28a745;">✓ No prazo</span>')


@admin.register(UsuarioModel)
class UsuarioAdmin(admin.ModelAdmin):
    list_display = ['nome', 'email', 'papel']
    list_filter = ['papel']
    search_fields = ['nome', 'email']


@admin.register(CategoriaModel)
class CategoriaAdmin(admin.ModelAdmin):
    list_display = ['nome', 'parent']
    list_filter = ['parent']
    search_fields = ['nome']
