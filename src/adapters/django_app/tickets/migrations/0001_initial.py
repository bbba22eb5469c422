"""
Migration inicial do HelpDesk.

Cria as tabelas:
- usuarios / categorias: cadastros
- tickets: agregado principal
- ticket_acoes: auditoria
- ticket_comentarios / ticket_anexos: filhos do ticket
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


STATUS_CHOICES = [
    ('Novo', 'Novo'),
    ('Em Análise', 'Em Análise'),
    ('Em Andamento', 'Em Andamento'),
    ('Resolvido', 'Resolvido'),
    ('Fechado', 'Fechado'),
    ('Cancelado', 'Cancelado'),
]

PRIORIDADE_CHOICES = [
    ('Baixa', 'Baixa'),
    ('Média', 'Média'),
    ('Alta', 'Alta'),
    ('Crítica', 'Crítica'),
]


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: usuarios
        # =================================================================
        migrations.CreateModel(
            name='UsuarioModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('nome', models.CharField(max_length=180)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('papel', models.CharField(
                    max_length=20,
                    choices=[
                        ('Requester', 'Requester'),
                        ('Agent', 'Agent'),
                        ('Manager', 'Manager'),
                    ],
                    db_index=True,
                )),
            ],
            options={
                'db_table': 'usuarios',
                'verbose_name': 'Usuário',
                'verbose_name_plural': 'Usuários',
                'ordering': ['nome'],
            },
        ),

        # =================================================================
        # Tabela: categorias
        # =================================================================
        migrations.CreateModel(
            name='CategoriaModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('nome', models.CharField(max_length=180, unique=True)),
                ('parent', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.RESTRICT,
                    related_name='filhas',
                    to='tickets.categoriamodel',
                )),
            ],
            options={
                'db_table': 'categorias',
                'verbose_name': 'Categoria',
                'verbose_name_plural': 'Categorias',
                'ordering': ['nome'],
            },
        ),

        # =================================================================
        # Tabela: tickets
        # =================================================================
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do ticket'
                )),
                ('titulo', models.CharField(
                    max_length=180,
                    db_index=True,
                    help_text='Título descritivo do ticket'
                )),
                ('descricao', models.TextField(
                    help_text='Descrição detalhada do problema'
                )),
                ('status', models.CharField(
                    max_length=20,
                    choices=STATUS_CHOICES,
                    default='Novo',
                    db_index=True,
                )),
                ('prioridade', models.CharField(
                    max_length=20,
                    choices=PRIORIDADE_CHOICES,
                    default='Média',
                    db_index=True,
                )),
                ('solicitante', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='tickets_solicitados',
                    to='tickets.usuariomodel',
                )),
                ('responsavel', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='tickets_atribuidos',
                    to='tickets.usuariomodel',
                )),
                ('categoria', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='tickets',
                    to='tickets.categoriamodel',
                )),
                ('criado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True,
                )),
                ('atribuido_em', models.DateTimeField(blank=True, null=True)),
                ('fechado_em', models.DateTimeField(blank=True, null=True)),
                ('sla_inicio_em', models.DateTimeField(blank=True, null=True)),
                ('sla_prazo', models.DateTimeField(
                    blank=True,
                    null=True,
                    db_index=True,
                    help_text='Prazo máximo para resolução'
                )),
                ('versao', models.PositiveIntegerField(default=1)),
            ],
            options={
                'db_table': 'tickets',
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['status', 'criado_em'], name='tickets_status_e1b3c2_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['responsavel', 'status'], name='tickets_respons_5a9d10_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['status', 'sla_prazo'], name='tickets_status_7c4f21_idx'),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['solicitante', 'criado_em'], name='tickets_solicit_3e8a47_idx'),
        ),

        # =================================================================
        # Tabela: ticket_acoes
        # =================================================================
        migrations.CreateModel(
            name='TicketAcaoModel',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('descricao', models.CharField(max_length=600)),
                ('criado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True,
                )),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='acoes',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_acoes',
                'verbose_name': 'Ação de Ticket',
                'verbose_name_plural': 'Ações de Tickets',
                'ordering': ['-criado_em', '-id'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketacaomodel',
            index=models.Index(fields=['ticket', 'criado_em'], name='ticket_acoe_ticket__9b2e55_idx'),
        ),

        # =================================================================
        # Tabela: ticket_comentarios
        # =================================================================
        migrations.CreateModel(
            name='TicketComentarioModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('visibilidade', models.CharField(
                    max_length=10,
                    choices=[('Público', 'Público'), ('Interno', 'Interno')],
                    default='Público',
                )),
                ('mensagem', models.TextField(max_length=4000)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('autor', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='comentarios',
                    to='tickets.usuariomodel',
                )),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='comentarios',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_comentarios',
                'verbose_name': 'Comentário',
                'verbose_name_plural': 'Comentários',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketcomentariomodel',
            index=models.Index(fields=['ticket', 'criado_em'], name='ticket_come_ticket__4d7f18_idx'),
        ),

        # =================================================================
        # Tabela: ticket_anexos
        # =================================================================
        migrations.CreateModel(
            name='AnexoModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('nome_arquivo', models.CharField(max_length=255)),
                ('content_type', models.CharField(max_length=255)),
                ('tamanho_bytes', models.BigIntegerField()),
                ('storage_key', models.CharField(max_length=500)),
                ('url_publica', models.CharField(max_length=1000)),
                ('enviado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('autor', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='anexos',
                    to='tickets.usuariomodel',
                )),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='anexos',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'db_table': 'ticket_anexos',
                'verbose_name': 'Anexo',
                'verbose_name_plural': 'Anexos',
                'ordering': ['enviado_em'],
            },
        ),
    ]
