"""
Configuração do Django App do HelpDesk.

Um único app (label `tickets`) concentra os models de tickets e
cadastros, para que a migration inicial crie as FKs entre eles.
"""

from django.apps import AppConfig


class TicketsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.tickets'
    label = 'tickets'
    verbose_name = 'HelpDesk'
