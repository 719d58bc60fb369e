"""
Configuração pytest para testes com Django.

Este arquivo configura:
- Django settings para testes
- Banco de dados SQLite em memória
"""

import pytest


def pytest_configure(config):
    """Configura Django antes dos testes."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'src.adapters.django_app.repairs',
            ],
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Sao_Paulo',
        )
        django.setup()


@pytest.fixture
def django_store(db):
    """DjangoDurableStore com banco limpo por teste."""
    from src.adapters.django_app.repairs.stores import DjangoDurableStore
    return DjangoDurableStore()
