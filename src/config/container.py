"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância por processo (gateways, store, registro)
- Selector: Escolhe a implementação pelo modo configurado
  (INTEGRATION_MODE, DURABLE_STORE_MODE)

Os imports dos adapters são lazy: o modo 'memory' não carrega Django nem httpx.
"""

from dependency_injector import containers, providers
from typing import Any, Dict, Optional


def _carregar(modulo: str, nome: str):
    return getattr(__import__(modulo, fromlist=[nome]), nome)


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: Valores vindos de src/config/settings.py
    - Infrastructure: Clientes HTTP
    - Ports: Triagem, ledger, armazenamento, diretórios
    - Registry: TicketRegistry (um por processo)

    Example:
        container = get_container()
        registry = container.ticket_registry()
        registry.carregar()
    """

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure (Lazy - criado sob demanda)
    # =========================================================================

    screening_client = providers.Singleton(
        lambda base_url, timeout: _carregar(
            'src.adapters.http.client', 'JsonHttpClient'
        )(base_url=base_url, timeout=timeout),
        base_url=config.screening_api_url,
        timeout=config.http_timeout_seconds,
    )

    ledger_client = providers.Singleton(
        lambda base_url, timeout: _carregar(
            'src.adapters.http.client', 'JsonHttpClient'
        )(base_url=base_url, timeout=timeout),
        base_url=config.ledger_api_url,
        timeout=config.http_timeout_seconds,
    )

    # =========================================================================
    # Ports (Singleton - uma instância por processo)
    # =========================================================================

    screening_gateway = providers.Selector(
        config.integration_mode,
        memory=providers.Singleton(
            lambda: _carregar('src.core.repairs.ports', 'InMemoryScreeningGateway')()
        ),
        http=providers.Singleton(
            lambda client: _carregar(
                'src.adapters.http.screening', 'HttpScreeningGateway'
            )(client),
            client=screening_client,
        ),
    )

    remote_ledger = providers.Selector(
        config.integration_mode,
        memory=providers.Singleton(
            lambda: _carregar('src.core.repairs.ports', 'InMemoryRemoteLedger')()
        ),
        http=providers.Singleton(
            lambda client: _carregar(
                'src.adapters.http.ledger', 'HttpRemoteLedger'
            )(client),
            client=ledger_client,
        ),
    )

    durable_store = providers.Selector(
        config.durable_store_mode,
        memory=providers.Singleton(
            lambda: _carregar('src.core.repairs.ports', 'InMemoryDurableStore')()
        ),
        django=providers.Singleton(
            lambda: _carregar(
                'src.adapters.django_app.repairs.stores', 'DjangoDurableStore'
            )()
        ),
    )

    client_directory = providers.Singleton(
        lambda: _carregar('src.core.repairs.ports', 'InMemoryClientDirectory')()
    )

    technician_directory = providers.Singleton(
        lambda tecnicos: _carregar(
            'src.core.repairs.ports', 'InMemoryTechnicianDirectory'
        ).from_config(tecnicos or []),
        tecnicos=config.default_technicians,
    )

    # =========================================================================
    # Registry
    # =========================================================================

    ticket_registry = providers.Singleton(
        lambda gateway, ledger, store, clientes, tecnicos: _carregar(
            'src.core.repairs.registry', 'TicketRegistry'
        )(
            gateway=gateway,
            ledger=ledger,
            store=store,
            clientes=clientes,
            tecnicos=tecnicos,
        ),
        gateway=screening_gateway,
        ledger=remote_ledger,
        store=durable_store,
        clientes=client_directory,
        tecnicos=technician_directory,
    )


def config_from_settings() -> Dict[str, Any]:
    """Monta a configuração do container a partir de src/config/settings.py."""
    from src.config import settings

    return {
        'integration_mode': settings.INTEGRATION_MODE,
        'durable_store_mode': settings.DURABLE_STORE_MODE,
        'screening_api_url': settings.SCREENING_API_URL,
        'ledger_api_url': settings.LEDGER_API_URL,
        'http_timeout_seconds': settings.HTTP_TIMEOUT_SECONDS,
        'default_technicians': settings.DEFAULT_TECHNICIANS,
    }


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization).
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(config_from_settings())

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo.
    """
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

class TestingContainer(containers.DeclarativeContainer):
    """
    Container para testes.

    Usa InMemory implementations para testes rápidos.

    Example:
        container = TestingContainer()
        container.remote_ledger.override(
            providers.Singleton(InMemoryRemoteLedger, falhar=True)
        )
    """

    config = providers.Configuration()

    screening_gateway = providers.Singleton(
        lambda: _carregar('src.core.repairs.ports', 'InMemoryScreeningGateway')()
    )

    remote_ledger = providers.Singleton(
        lambda: _carregar('src.core.repairs.ports', 'InMemoryRemoteLedger')()
    )

    durable_store = providers.Singleton(
        lambda: _carregar('src.core.repairs.ports', 'InMemoryDurableStore')()
    )

    client_directory = providers.Singleton(
        lambda: _carregar('src.core.repairs.ports', 'InMemoryClientDirectory')()
    )

    technician_directory = providers.Singleton(
        lambda tecnicos: _carregar(
            'src.core.repairs.ports', 'InMemoryTechnicianDirectory'
        ).from_config(tecnicos or []),
        tecnicos=config.default_technicians,
    )

    ticket_registry = providers.Singleton(
        lambda gateway, ledger, store, clientes, tecnicos: _carregar(
            'src.core.repairs.registry', 'TicketRegistry'
        )(
            gateway=gateway,
            ledger=ledger,
            store=store,
            clientes=clientes,
            tecnicos=tecnicos,
        ),
        gateway=screening_gateway,
        ledger=remote_ledger,
        store=durable_store,
        clientes=client_directory,
        tecnicos=technician_directory,
    )
