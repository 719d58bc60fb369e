"""
Data Transfer Objects (DTOs) do Domínio de Reparos.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento das entidades para camadas externas.

Tipos de DTOs:
- Input DTOs: Dados de entrada do ingresso de um equipamento
- Output DTOs: Resumo somente leitura para exibição/exportação
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .entities import ClientEntity, RepairTicketEntity
from .value_objects import Device


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class IngressoInputDTO:
    """
    DTO de entrada para o ingresso (recebimento) de um equipamento.

    Imutável (frozen=True) para garantir que dados
    validados não sejam alterados acidentalmente.

    Attributes:
        ticket_id: ID opaco do novo ticket
        numero_serie, imei, marca, modelo: Dados do equipamento
        cliente_id: ID do cliente
        cliente_nome: Nome do cliente
        filial: Filial que recebe o equipamento
    """

    ticket_id: str
    numero_serie: str
    imei: str
    marca: str
    modelo: str
    cliente_id: str
    cliente_nome: str
    filial: str

    def to_device(self) -> Device:
        return Device(
            numero_serie=self.numero_serie,
            imei=self.imei,
            marca=self.marca,
            modelo=self.modelo,
        )

    def to_client(self) -> ClientEntity:
        return ClientEntity.criar(id=self.cliente_id, nome=self.cliente_nome)

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "numero_serie": self.numero_serie,
            "imei": self.imei,
            "marca": self.marca,
            "modelo": self.modelo,
            "cliente_id": self.cliente_id,
            "cliente_nome": self.cliente_nome,
            "filial": self.filial,
        }


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass(frozen=True)
class HistoricoItemDTO:
    """Item da linha do tempo de estados."""

    estado: str
    nota: str
    registrado_em: datetime

    def to_dict(self) -> dict:
        return {
            "estado": self.estado,
            "nota": self.nota,
            "registrado_em": self.registrado_em.isoformat(),
        }


@dataclass(frozen=True)
class TicketResumoDTO:
    """
    Resumo somente leitura de um ticket de reparo.

    Usado para exibição e exportação; construí-lo não altera o ticket.

    Attributes:
        id: Identificador do ticket
        cliente: Nome do cliente
        equipamento: Marca e modelo
        filial: Filial de ingresso
        tecnico: Nome do técnico ou "Não atribuído"
        estado: Estado atual (valor do enum)
        custo_estimado: Custo do diagnóstico (0 se ainda não há)
        total_sinal: Soma dos sinais pagos
        custo_pecas: Soma do custo das peças
        historico: Linha do tempo completa
    """

    id: str
    cliente: str
    equipamento: str
    filial: str
    tecnico: str
    estado: str
    custo_estimado: float
    total_sinal: float
    custo_pecas: float
    historico: tuple = field(default_factory=tuple)

    SEM_TECNICO = "Não atribuído"

    @classmethod
    def from_entity(cls, entity: RepairTicketEntity) -> "TicketResumoDTO":
        """
        Factory method para converter entidade em DTO.

        Args:
            entity: Entidade RepairTicketEntity

        Returns:
            DTO com dados da entidade
        """
        return cls(
            id=entity.id,
            cliente=entity.cliente.nome,
            equipamento=entity.dispositivo.rotulo,
            filial=entity.filial,
            tecnico=entity.tecnico.nome if entity.tecnico else cls.SEM_TECNICO,
            estado=entity.status.value,
            custo_estimado=entity.custo_estimado,
            total_sinal=entity.total_sinal,
            custo_pecas=entity.custo_pecas,
            historico=tuple(
                HistoricoItemDTO(
                    estado=h.estado.value,
                    nota=h.nota,
                    registrado_em=h.registrado_em,
                )
                for h in entity.historico
            ),
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "cliente": self.cliente,
            "equipamento": self.equipamento,
            "filial": self.filial,
            "tecnico": self.tecnico,
            "estado": self.estado,
            "custo_estimado": self.custo_estimado,
            "total_sinal": self.total_sinal,
            "custo_pecas": self.custo_pecas,
            "historico": [h.to_dict() for h in self.historico],
        }


@dataclass(frozen=True)
class TicketListItemDTO:
    """
    DTO para listagens (seletor de tickets).

    Attributes:
        id: Identificador do ticket
        rotulo: Texto de exibição "ID | Marca Modelo"
        estado: Estado atual
    """

    id: str
    rotulo: str
    estado: str
    tecnico_id: Optional[str] = None

    @classmethod
    def from_entity(cls, entity: RepairTicketEntity) -> "TicketListItemDTO":
        return cls(
            id=entity.id,
            rotulo=f"{entity.id} | {entity.dispositivo.rotulo}",
            estado=entity.status.value,
            tecnico_id=entity.tecnico.id if entity.tecnico else None,
        )


def resumir_todos(tickets: List[RepairTicketEntity]) -> List[TicketResumoDTO]:
    return [TicketResumoDTO.from_entity(t) for t in tickets]
