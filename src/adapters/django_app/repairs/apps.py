"""
Configuração do Django App para Reparos.
"""

from django.apps import AppConfig


class RepairsConfig(AppConfig):
    """Configuração do app Reparos."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.repairs'
    label = 'repairs'
    verbose_name = 'Assistência Técnica - Reparos'
