"""
Domínio de Reparos - Ciclo de vida de um equipamento em assistência técnica.

Este módulo contém toda a lógica de negócio relacionada a tickets
de reparo, incluindo:
- Entidades (RepairTicketEntity, ClientEntity, TechnicianEntity)
- Value Objects (Device, Part, Diagnosis)
- DTOs (Input/Output Data Transfer Objects)
- Ports (Triagem, Ledger remoto, Armazenamento durável)
- Registro (TicketRegistry)

Características do Domínio:
- Fluxo de estados estritamente para frente
- Pré-condições validadas no próprio ticket antes de qualquer mutação
- Histórico de estados somente de inclusão
- Triagem de série/IMEI reportados antes do ingresso
"""

from .entities import (
    RepairTicketEntity,
    RepairStatus,
    RepairAction,
    ClientEntity,
    TechnicianEntity,
    HistoryEntry,
)
from .value_objects import Device, Part, Diagnosis
from .dtos import IngressoInputDTO, TicketResumoDTO, TicketListItemDTO
from .mappers import TicketSnapshotMapper
from .ports import (
    ScreeningGateway,
    RemoteLedger,
    DurableStore,
    ResultadoTriagem,
    InMemoryScreeningGateway,
    InMemoryRemoteLedger,
    InMemoryDurableStore,
    InMemoryClientDirectory,
    InMemoryTechnicianDirectory,
)
from .registry import TicketRegistry

__all__ = [
    # Entities
    "RepairTicketEntity",
    "RepairStatus",
    "RepairAction",
    "ClientEntity",
    "TechnicianEntity",
    "HistoryEntry",
    # Value Objects
    "Device",
    "Part",
    "Diagnosis",
    # DTOs
    "IngressoInputDTO",
    "TicketResumoDTO",
    "TicketListItemDTO",
    # Mappers
    "TicketSnapshotMapper",
    # Ports
    "ScreeningGateway",
    "RemoteLedger",
    "DurableStore",
    "ResultadoTriagem",
    "InMemoryScreeningGateway",
    "InMemoryRemoteLedger",
    "InMemoryDurableStore",
    "InMemoryClientDirectory",
    "InMemoryTechnicianDirectory",
    # Registry
    "TicketRegistry",
]
