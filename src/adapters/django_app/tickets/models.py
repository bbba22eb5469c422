"""
Django Models para o domínio de Tickets e Cadastros.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Relacionamentos e regras de exclusão:
- TicketModel.solicitante / responsavel / categoria: SET_NULL
- TicketAcaoModel / TicketComentarioModel / AnexoModel: CASCADE com o ticket
- TicketComentarioModel.autor / AnexoModel.autor: SET_NULL
- CategoriaModel.parent: RESTRICT (categoria com filhos não é excluída)
"""

from django.db import models
from django.utils import timezone


class UserRoleChoices(models.TextChoices):
    """Choices para papel de usuário (espelha UserRole do Core)."""
    REQUESTER = 'Requester', 'Requester'
    AGENT = 'Agent', 'Agent'
    MANAGER = 'Manager', 'Manager'


class TicketStatusChoices(models.TextChoices):
    """Choices para status de ticket (espelha TicketStatus do Core)."""
    NOVO = 'Novo', 'Novo'
    EM_ANALISE = 'Em Análise', 'Em Análise'
    EM_ANDAMENTO = 'Em Andamento', 'Em Andamento'
    RESOLVIDO = 'Resolvido', 'Resolvido'
    FECHADO = 'Fechado', 'Fechado'
    CANCELADO = 'Cancelado', 'Cancelado'


class TicketPriorityChoices(models.TextChoices):
    """Choices para prioridade de ticket (espelha TicketPriority do Core)."""
    BAIXA = 'Baixa', 'Baixa'
    MEDIA = 'Média', 'Média'
    ALTA = 'Alta', 'Alta'
    CRITICA = 'Crítica', 'Crítica'


class CommentVisibilityChoices(models.TextChoices):
    PUBLICO = 'Público', 'Público'
    INTERNO = 'Interno', 'Interno'


STATUS_INATIVOS = (TicketStatusChoices.FECHADO, TicketStatusChoices.CANCELADO)


class UsuarioModel(models.Model):
    """Diretório de usuários (identidade + papel)."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    nome = models.CharField(max_length=180)
    email = models.EmailField(max_length=254, unique=True)
    papel = models.CharField(
        max_length=20,
        choices=UserRoleChoices.choices,
        db_index=True,
    )

    class Meta:
        db_table = 'usuarios'
        verbose_name = 'Usuário'
        verbose_name_plural = 'Usuários'
        ordering = ['nome']

    def __str__(self):
        return f"{self.nome} <{self.email}> ({self.papel})"


class CategoriaModel(models.Model):
    """Categoria de ticket, com no máximo dois níveis."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    nome = models.CharField(max_length=180, unique=True)
    parent = models.ForeignKey(
        'self',
        on_delete=models.RESTRICT,
        null=True,
        blank=True,
        related_name='filhas',
    )

    class Meta:
        db_table = 'categorias'
        verbose_name = 'Categoria'
        verbose_name_plural = 'Categorias'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class TicketModel(models.Model):
    """
    Model Django para persistência de Tickets.

    Este model é um ADAPTER que persiste dados do TicketEntity.
    NÃO contém lógica de negócio - apenas estrutura de dados.

    Fields:
        id: UUID como primary key (gerado pela Entity)
        versao: Versão da linha, incrementada a cada update
            (controle de concorrência otimista)
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do ticket"
    )

    titulo = models.CharField(
        max_length=180,
        db_index=True,
        help_text="Título descritivo do ticket"
    )

    descricao = models.TextField(
        help_text="Descrição detalhada do problema"
    )

    status = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.NOVO,
        db_index=True,
    )

    prioridade = models.CharField(
        max_length=20,
        choices=TicketPriorityChoices.choices,
        default=TicketPriorityChoices.MEDIA,
        db_index=True,
    )

    solicitante = models.ForeignKey(
        UsuarioModel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tickets_solicitados',
    )

    responsavel = models.ForeignKey(
        UsuarioModel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tickets_atribuidos',
    )

    categoria = models.ForeignKey(
        CategoriaModel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tickets',
    )

    # Timestamps
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)
    atribuido_em = models.DateTimeField(null=True, blank=True)
    fechado_em = models.DateTimeField(null=True, blank=True)

    # SLA
    sla_inicio_em = models.DateTimeField(null=True, blank=True)
    sla_prazo = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Prazo máximo para resolução"
    )

    versao = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['status', 'criado_em'], name='tickets_status_e1b3c2_idx'),
            models.Index(fields=['responsavel', 'status'], name='tickets_respons_5a9d10_idx'),
            models.Index(fields=['status', 'sla_prazo'], name='tickets_status_7c4f21_idx'),
            models.Index(fields=['solicitante', 'criado_em'], name='tickets_solicit_3e8a47_idx'),
        ]

    def __str__(self):
        return f"[{self.id[:8]}] {self.titulo}"

    def __repr__(self):
        return f"<TicketModel id={self.id[:8]} status={self.status} versao={self.versao}>"


class TicketAcaoModel(models.Model):
    """
    Histórico de ações de um ticket (auditoria).

    Somente inclusão; removido em cascata com o ticket.
    """

    id = models.BigAutoField(primary_key=True)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='acoes',
    )

    descricao = models.CharField(max_length=600)

    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'ticket_acoes'
        verbose_name = 'Ação de Ticket'
        verbose_name_plural = 'Ações de Tickets'
        ordering = ['-criado_em', '-id']
        indexes = [
            models.Index(fields=['ticket', 'criado_em'], name='ticket_acoe_ticket__9b2e55_idx'),
        ]

    def __str__(self):
        return f"{self.ticket_id[:8]} @ {self.criado_em}: {self.descricao[:40]}"


class TicketComentarioModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='comentarios',
    )

    autor = models.ForeignKey(
        UsuarioModel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='comentarios',
    )

    visibilidade = models.CharField(
        max_length=10,
        choices=CommentVisibilityChoices.choices,
        default=CommentVisibilityChoices.PUBLICO,
    )

    mensagem = models.TextField(max_length=4000)

    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_comentarios'
        verbose_name = 'Comentário'
        verbose_name_plural = 'Comentários'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['ticket', 'criado_em'], name='ticket_come_ticket__4d7f18_idx'),
        ]

    def __str__(self):
        return f"{self.visibilidade} - {self.ticket_id[:8]}: {self.mensagem[:40]}"


class AnexoModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='anexos',
    )

    nome_arquivo = models.CharField(max_length=255)
    content_type = models.CharField(max_length=255)
    tamanho_bytes = models.BigIntegerField()
    storage_key = models.CharField(max_length=500)
    url_publica = models.CharField(max_length=1000)

    autor = models.ForeignKey(
        UsuarioModel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='anexos',
    )

    enviado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_anexos'
        verbose_name = 'Anexo'
        verbose_name_plural = 'Anexos'
        ordering = ['enviado_em']

    def __str__(self):
        return f"{self.nome_arquivo} ({self.tamanho_bytes} bytes)"
