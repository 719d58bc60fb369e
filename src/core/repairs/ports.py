"""
Ports (Interfaces) do Domínio de Reparos.

Define os contratos que os Adapters de infraestrutura devem implementar.

Tipos de Ports:
- ScreeningGateway: Consulta de equipamentos reportados (série/IMEI)
- RemoteLedger: Registro remoto de criação, diagnóstico e estados
- DurableStore: Snapshot completo do registro + ticket selecionado
- ClientDirectory / TechnicianDirectory: Resolução de referências por ID

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core

Example:
    # No Adapter (Django)
    class DjangoDurableStore:
        def salvar_snapshot(self, records):
            with transaction.atomic():
                ...
"""

import json
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from .entities import ClientEntity, RepairStatus, TechnicianEntity
from .exceptions import LedgerSyncFailedError, ScreeningUnavailableError
from .mappers import TicketRecord
from .value_objects import Diagnosis


@dataclass(frozen=True)
class ResultadoTriagem:
    """Resposta da triagem: True indica série/IMEI reportado."""

    serie_reportada: bool
    imei_reportado: bool

    @property
    def reportado(self) -> bool:
        return self.serie_reportada or self.imei_reportado


@runtime_checkable
class ScreeningGateway(Protocol):
    """
    Interface para o serviço de triagem de equipamentos reportados.

    Consultado uma única vez, no ingresso, antes de criar o ticket.
    """

    def consultar(self, numero_serie: str, imei: str) -> ResultadoTriagem:
        """
        Verifica se série ou IMEI constam como reportados.

        Raises:
            ScreeningUnavailableError: Se o serviço falhar
        """
        ...


@runtime_checkable
class RemoteLedger(Protocol):
    """
    Interface para o registro remoto (auditoria/relatórios).

    Cada chamada lança LedgerSyncFailedError em caso de falha; o estado
    local já aplicado não é desfeito.
    """

    def registrar_criacao(self, ticket_id: str, estado: RepairStatus) -> None:
        ...

    def registrar_diagnostico(self, ticket_id: str, diagnostico: Diagnosis) -> None:
        ...

    def registrar_mudanca_estado(self, ticket_id: str, estado: RepairStatus, nota: str) -> None:
        ...


@runtime_checkable
class DurableStore(Protocol):
    """
    Interface para persistência do snapshot completo do registro.

    salvar_snapshot sobrescreve o conjunto inteiro de registros.
    """

    def salvar_snapshot(self, records: List[TicketRecord]) -> None:
        ...

    def carregar_snapshot(self) -> List[TicketRecord]:
        ...

    def salvar_id_selecionado(self, ticket_id: str) -> None:
        ...

    def carregar_id_selecionado(self) -> Optional[str]:
        ...

    def limpar(self) -> None:
        ...


@runtime_checkable
class ClientDirectory(Protocol):
    """Diretório de clientes: garante uma instância por ID."""

    def registrar(self, cliente: ClientEntity) -> ClientEntity:
        """Registra o cliente ou devolve a instância já conhecida com o mesmo ID."""
        ...

    def substituir(self, cliente: ClientEntity) -> ClientEntity:
        """Grava o cliente como está, descartando a instância anterior com o mesmo ID."""
        ...

    def obter(self, cliente_id: str) -> Optional[ClientEntity]:
        ...

    def limpar(self) -> None:
        ...


@runtime_checkable
class TechnicianDirectory(Protocol):

    def obter(self, tecnico_id: str) -> Optional[TechnicianEntity]:
        ...

    def listar(self) -> List[TechnicianEntity]:
        ...


# =============================================================================
# Implementações em memória
# =============================================================================

class InMemoryScreeningGateway:
    """
    Triagem em memória com listas fixas de série/IMEI reportados.

    Útil para:
    - Testes unitários
    - Desenvolvimento local sem o serviço de triagem

    Example:
        gateway = InMemoryScreeningGateway()
        gateway.consultar("SERIE-REPORTADA-001", "IMEI-OK").reportado  # True
    """

    SERIES_REPORTADAS = frozenset({"SERIE-REPORTADA-001", "BLOCK-SERIE-88"})
    IMEIS_REPORTADOS = frozenset({"IMEI-REPORTADO-999", "000000000000000"})

    def __init__(
        self,
        series_reportadas: Optional[Iterable[str]] = None,
        imeis_reportados: Optional[Iterable[str]] = None,
        disponivel: bool = True,
    ):
        self.series_reportadas = set(
            self.SERIES_REPORTADAS if series_reportadas is None else series_reportadas
        )
        self.imeis_reportados = set(
            self.IMEIS_REPORTADOS if imeis_reportados is None else imeis_reportados
        )
        self.disponivel = disponivel
        self.consultas: List[Tuple[str, str]] = []

    def consultar(self, numero_serie: str, imei: str) -> ResultadoTriagem:
        self.consultas.append((numero_serie, imei))
        if not self.disponivel:
            raise ScreeningUnavailableError()
        return ResultadoTriagem(
            serie_reportada=numero_serie in self.series_reportadas,
            imei_reportado=imei in self.imeis_reportados,
        )


class InMemoryRemoteLedger:
    """
    Ledger em memória que apenas registra as chamadas recebidas.

    Com falhar=True todas as chamadas lançam LedgerSyncFailedError.
    """

    def __init__(self, falhar: bool = False):
        self.falhar = falhar
        self.chamadas: List[Tuple[str, dict]] = []

    def registrar_criacao(self, ticket_id: str, estado: RepairStatus) -> None:
        self._registrar("criacao", {"id": ticket_id, "estado": estado.value})

    def registrar_diagnostico(self, ticket_id: str, diagnostico: Diagnosis) -> None:
        self._registrar("diagnostico", {"id": ticket_id, "diagnostico": diagnostico.to_dict()})

    def registrar_mudanca_estado(self, ticket_id: str, estado: RepairStatus, nota: str) -> None:
        self._registrar("estado", {"id": ticket_id, "estado": estado.value, "nota": nota})

    def _registrar(self, operacao: str, payload: dict) -> None:
        if self.falhar:
            raise LedgerSyncFailedError(f"Registro remoto indisponível ({operacao})")
        self.chamadas.append((operacao, payload))

    def operacoes(self) -> List[str]:
        return [operacao for operacao, _ in self.chamadas]


class InMemoryDurableStore:
    """
    Armazenamento em memória.

    Guarda os registros serializados em JSON, como um armazenamento
    real faria, para que nenhum objeto vivo vaze entre gravações.

    Não usar em produção!
    """

    def __init__(self):
        self._snapshot: Optional[str] = None
        self._selecionado: Optional[str] = None
        self.gravacoes = 0

    def salvar_snapshot(self, records: List[TicketRecord]) -> None:
        self._snapshot = json.dumps(records)
        self.gravacoes += 1

    def carregar_snapshot(self) -> List[TicketRecord]:
        if not self._snapshot:
            return []
        return json.loads(self._snapshot)

    def salvar_id_selecionado(self, ticket_id: str) -> None:
        self._selecionado = ticket_id

    def carregar_id_selecionado(self) -> Optional[str]:
        return self._selecionado or None

    def limpar(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._snapshot = None
        self._selecionado = None


class InMemoryClientDirectory:
    """Diretório de clientes em memória."""

    def __init__(self):
        self._clientes: Dict[str, ClientEntity] = {}

    def registrar(self, cliente: ClientEntity) -> ClientEntity:
        existente = self._clientes.get(cliente.id)
        if existente is not None:
            # Autorização nunca regride: preserva a assinatura de qualquer lado
            if cliente.autorizacao_escrita:
                existente.assinar_autorizacao()
            return existente
        self._clientes[cliente.id] = cliente
        return cliente

    def substituir(self, cliente: ClientEntity) -> ClientEntity:
        self._clientes[cliente.id] = cliente
        return cliente

    def obter(self, cliente_id: str) -> Optional[ClientEntity]:
        return self._clientes.get(cliente_id)

    def listar(self) -> List[ClientEntity]:
        return list(self._clientes.values())

    def limpar(self) -> None:
        self._clientes.clear()


class InMemoryTechnicianDirectory:
    """Diretório de técnicos em memória."""

    def __init__(self, tecnicos: Iterable[TechnicianEntity] = ()):
        self._tecnicos: Dict[str, TechnicianEntity] = {t.id: t for t in tecnicos}

    @classmethod
    def from_config(cls, config: Iterable[dict]) -> "InMemoryTechnicianDirectory":
        """Cria o diretório a partir de dicts {id, nome, especialidades}."""
        return cls(
            TechnicianEntity.criar(
                id=item["id"],
                nome=item["nome"],
                especialidades=item.get("especialidades", []),
            )
            for item in config
        )

    def obter(self, tecnico_id: str) -> Optional[TechnicianEntity]:
        return self._tecnicos.get(tecnico_id)

    def listar(self) -> List[TechnicianEntity]:
        return list(self._tecnicos.values())
