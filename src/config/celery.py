"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Entregar Domain Events publicados após o commit (modo `celery`)
- Enviar notificações por e-mail fora do request
- Executar o monitor de SLA periodicamente (beat)

Arquitetura:
- Broker: RabbitMQ (mensagens entre Django e Workers)
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Broker, backend e serialização vêm do settings do Django
(prefixo CELERY_), para que settings_test possa trocá-los.

Uso:
    # Iniciar worker
    celery -A src.config.celery worker -l INFO -Q default,events,notifications

    # Iniciar beat (monitor de SLA)
    celery -A src.config.celery beat -l INFO
"""

import os

from celery import Celery
from kombu import Exchange, Queue

# Definir módulo de settings do Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('helpdesk')

# Carregar configurações do Django (CELERY_*)
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    worker_send_task_events=True,
    task_send_sent_event=True,
)

# Definir filas
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('notifications', Exchange('notifications'), routing_key='notifications.#'),
)

# Roteamento de tarefas para filas
app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.dispatch_domain_event': {'queue': 'events'},
    'src.adapters.django_app.events.handlers.handle_*': {'queue': 'notifications'},
    'src.adapters.django_app.events.handlers.verificar_sla_tickets': {'queue': 'default'},
}

# Auto-descoberta de tarefas
app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')


@app.on_after_finalize.connect
def configurar_agendamentos(sender, **kwargs):
    """Agenda o monitor de SLA com o intervalo do settings."""
    from django.conf import settings

    sender.add_periodic_task(
        float(settings.SLA_MONITOR_INTERVAL_SECONDS),
        sender.signature('src.adapters.django_app.events.handlers.verificar_sla_tickets'),
        name='verificar-sla-tickets',
    )
