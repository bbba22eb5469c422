"""
Configuração do HelpDesk.

Módulos:
- settings / settings_test: Configurações Django
- urls: Rotas principais
- wsgi: WSGI application
- celery: Aplicação Celery (eventos, notificações, monitor de SLA)
- container: Dependency Injection Container
"""

# Carrega a app Celery junto com o Django, para que @shared_task use ela
from .celery import app as celery_app

__all__ = ('celery_app',)
