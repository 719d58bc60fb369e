"""
Mapper de snapshot para tickets de reparo.

Converte RepairTicketEntity ⇄ registro plano (dict serializável em JSON),
o formato trocado com o armazenamento durável.

Princípios:
- Mapper é stateless
- Não contém lógica de negócio nem refaz validações de fluxo
- A conversão é sem perdas: to_entity(to_record(t)) reproduz o ticket
"""

from typing import Any, Callable, Dict, List, Optional

from .entities import (
    ClientEntity,
    HistoryEntry,
    RepairStatus,
    RepairTicketEntity,
    TechnicianEntity,
)
from .value_objects import Device, Diagnosis, Part

TicketRecord = Dict[str, Any]


class TicketSnapshotMapper:
    """
    Mapper entre RepairTicketEntity e registro de snapshot.

    Responsável por:
    - to_record(): Entity → dict
    - to_entity(): dict → Entity (sem triagem, campos restaurados como estão)
    - to_record_list(): List[Entity] → List[dict]
    """

    @staticmethod
    def to_record(entity: RepairTicketEntity) -> TicketRecord:
        return {
            "id": entity.id,
            "dispositivo": entity.dispositivo.to_dict(),
            "cliente": entity.cliente.to_dict(),
            "filial": entity.filial,
            "diagnostico": entity.diagnostico.to_dict() if entity.diagnostico else None,
            "total_sinal": entity.total_sinal,
            "tecnico": entity.tecnico.to_dict() if entity.tecnico else None,
            "pecas": [p.to_dict() for p in entity.pecas],
            "status": entity.status.name,
            "historico": [h.to_dict() for h in entity.historico],
        }

    @staticmethod
    def to_entity(
        record: TicketRecord,
        resolver_cliente: Optional[Callable[[ClientEntity], ClientEntity]] = None,
    ) -> RepairTicketEntity:
        """
        Reconstrói o ticket a partir de um registro.

        Args:
            record: Registro produzido por to_record()
            resolver_cliente: Recebe o cliente lido e devolve a instância
                compartilhada (ex.: diretório de clientes). Sem ele, cada
                ticket recebe sua própria instância.
        """
        dados_cliente = record["cliente"]
        cliente = ClientEntity(
            id=dados_cliente["id"],
            nome=dados_cliente["nome"],
            autorizacao_escrita=bool(dados_cliente.get("autorizacao_escrita", False)),
        )
        if resolver_cliente is not None:
            cliente = resolver_cliente(cliente)

        dados_tecnico = record.get("tecnico")
        tecnico = None
        if dados_tecnico:
            tecnico = TechnicianEntity(
                id=dados_tecnico["id"],
                nome=dados_tecnico["nome"],
                especialidades=frozenset(dados_tecnico.get("especialidades", [])),
            )

        dados_diagnostico = record.get("diagnostico")

        return RepairTicketEntity(
            id=record["id"],
            dispositivo=Device.from_dict(record["dispositivo"]),
            cliente=cliente,
            filial=record["filial"],
            diagnostico=Diagnosis.from_dict(dados_diagnostico) if dados_diagnostico else None,
            tecnico=tecnico,
            pecas=[Part.from_dict(p) for p in record.get("pecas", [])],
            total_sinal=record.get("total_sinal", 0),
            status=RepairStatus.from_string(record["status"]),
            historico=[HistoryEntry.from_dict(h) for h in record.get("historico", [])],
        )

    @classmethod
    def to_record_list(cls, entities: List[RepairTicketEntity]) -> List[TicketRecord]:
        return [cls.to_record(e) for e in entities]
