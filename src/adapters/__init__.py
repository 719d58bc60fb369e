"""
Adapters Layer - Implementações dos Ports do Core.

- django_app: Armazenamento durável via Django ORM
- http: Triagem e registro remoto via HTTP (httpx)
"""
