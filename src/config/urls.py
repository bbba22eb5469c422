"""
URL Configuration do HelpDesk.

Estrutura:
- /admin/ - Django Admin
- /api/ - API JSON (tickets, comentários, anexos, cadastros)
- /health/ - Health check
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('src.adapters.django_app.tickets.urls')),
    path('health/', health, name='health'),
]

# Arquivos enviados servidos pelo Django apenas em desenvolvimento
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
