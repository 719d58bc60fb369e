"""
Configurações globais do Pytest para RepairShop Manager.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures e configurações compartilhadas.
"""

import pytest
import sys
from pathlib import Path

# Adicionar raiz do projeto ao path para imports "src.*"
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

from src.core.repairs import (  # noqa: E402
    ClientEntity,
    Device,
    Diagnosis,
    InMemoryClientDirectory,
    InMemoryDurableStore,
    InMemoryRemoteLedger,
    InMemoryScreeningGateway,
    InMemoryTechnicianDirectory,
    RepairTicketEntity,
    TechnicianEntity,
    TicketRegistry,
)

TECNICOS_PADRAO = [
    {'id': 'T1', 'nome': 'Luis Rojas', 'especialidades': ['Samsung', 'Xiaomi']},
    {'id': 'T2', 'nome': 'Mara Salas', 'especialidades': ['Apple', 'Motorola']},
    {'id': 'T3', 'nome': 'Jorge Pina', 'especialidades': ['Samsung', 'Apple', 'Huawei']},
]


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return root_path


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset do container global entre testes.

    Garante que cada teste inicia com estado limpo.
    """
    yield
    from src.config.container import reset_container
    reset_container()


# =============================================================================
# Fixtures de domínio
# =============================================================================

@pytest.fixture
def device():
    return Device(
        numero_serie="SERIE-OK-123",
        imei="IMEI-OK-456",
        marca="Samsung",
        modelo="S22",
    )


@pytest.fixture
def cliente():
    return ClientEntity.criar(id="C1", nome="Ana Torres")


@pytest.fixture
def tecnico_samsung():
    return TechnicianEntity.criar(id="T1", nome="Luis Rojas", especialidades=["Samsung", "Xiaomi"])


@pytest.fixture
def tecnico_apple():
    return TechnicianEntity.criar(id="T2", nome="Mara Salas", especialidades=["Apple", "Motorola"])


@pytest.fixture
def diagnostico():
    return Diagnosis(descricao="Tela quebrada e bateria degradada", custo_estimado=500)


@pytest.fixture
def ticket(device, cliente):
    """Ticket recém-criado (em revisão inicial)."""
    return RepairTicketEntity.criar(
        id="REP-0001",
        dispositivo=device,
        cliente=cliente,
        filial="Filial Centro",
    )


@pytest.fixture
def ticket_pronto(ticket, diagnostico, tecnico_samsung):
    """Ticket com todas as condições para iniciar o reparo."""
    ticket.registrar_diagnostico(diagnostico)
    ticket.registrar_condicoes(autorizacao=True, sinal=250)
    ticket.atribuir_tecnico(tecnico_samsung)
    return ticket


# =============================================================================
# Fixtures do registro (colaboradores em memória)
# =============================================================================

@pytest.fixture
def gateway():
    return InMemoryScreeningGateway()


@pytest.fixture
def ledger():
    return InMemoryRemoteLedger()


@pytest.fixture
def store():
    return InMemoryDurableStore()


@pytest.fixture
def clientes():
    return InMemoryClientDirectory()


@pytest.fixture
def tecnicos():
    return InMemoryTechnicianDirectory.from_config(TECNICOS_PADRAO)


@pytest.fixture
def registry(gateway, ledger, store, clientes, tecnicos):
    return TicketRegistry(
        gateway=gateway,
        ledger=ledger,
        store=store,
        clientes=clientes,
        tecnicos=tecnicos,
    )
