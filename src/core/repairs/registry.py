"""
Registro de Tickets de Reparo (Application Service).

Orquestra o ciclo de vida dos tickets mantidos em memória,
coordenando a triagem no ingresso, o armazenamento durável e o
registro remoto em torno das mutações validadas pelo próprio ticket.

Operações:
- registrar_ingresso: Triagem + criação do ticket
- obter / listar: Consulta
- salvar_diagnostico / sincronizar_estado: Mutação + snapshot + ledger
- registrar_condicoes / atribuir_tecnico / adicionar_peca: Mutação + snapshot
- avancar: Comando de etapa + sincronização
- restaurar / carregar: Reconstrução a partir de snapshot
- selecionar / ticket_selecionado / limpar: Estado da sessão

Princípios:
- O registro não revalida regras de negócio; o ticket valida
- Falhas externas são lançadas DEPOIS da mutação local e do snapshot,
  sem rollback compensatório
- Dependências injetadas (DI), uma instância por processo
"""

import logging
from typing import Callable, Dict, List, Optional, TypeVar, Union

from src.core.shared.exceptions import EntityNotFoundError, ValidationError

from .dtos import IngressoInputDTO, TicketListItemDTO, TicketResumoDTO, resumir_todos
from .entities import (
    ClientEntity,
    RepairAction,
    RepairTicketEntity,
    TechnicianEntity,
)
from .exceptions import (
    DeviceFlaggedError,
    LedgerSyncFailedError,
    PersistenceFailedError,
    ScreeningUnavailableError,
)
from .mappers import TicketRecord, TicketSnapshotMapper
from .ports import (
    ClientDirectory,
    DurableStore,
    InMemoryClientDirectory,
    InMemoryTechnicianDirectory,
    RemoteLedger,
    ScreeningGateway,
    TechnicianDirectory,
)
from .value_objects import Device, Diagnosis, Part

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TicketRegistry:
    """
    Registro em memória de tickets de reparo.

    Fluxo do ingresso:
    1. Consultar a triagem (série + IMEI)
    2. Recusar se indisponível ou reportado
    3. Criar o ticket e guardar por ID
    4. Gravar o snapshot completo
    5. Informar a criação ao registro remoto

    Attributes:
        gateway: Serviço de triagem de equipamentos
        ledger: Registro remoto
        store: Armazenamento durável do snapshot
        clientes: Diretório de clientes (referências compartilhadas)
        tecnicos: Diretório de técnicos

    Example:
        registry = TicketRegistry(gateway, ledger, store)
        ticket = registry.registrar_ingresso("REP-0001", device, cliente, "Filial Centro")
        registry.salvar_diagnostico(ticket.id, Diagnosis("Tela quebrada", 500))
    """

    def __init__(
        self,
        gateway: ScreeningGateway,
        ledger: RemoteLedger,
        store: DurableStore,
        clientes: Optional[ClientDirectory] = None,
        tecnicos: Optional[TechnicianDirectory] = None,
    ):
        """
        Inicializa o registro com dependências injetadas.

        Args:
            gateway: Triagem consultada no ingresso
            ledger: Registro remoto espelhado a cada mudança
            store: Armazenamento do snapshot e do ticket selecionado
            clientes: Diretório de clientes (default: em memória)
            tecnicos: Diretório de técnicos (default: vazio)
        """
        self.gateway = gateway
        self.ledger = ledger
        self.store = store
        self.clientes = clientes if clientes is not None else InMemoryClientDirectory()
        self.tecnicos = tecnicos if tecnicos is not None else InMemoryTechnicianDirectory()
        self._tickets: Dict[str, RepairTicketEntity] = {}
        self._mapper = TicketSnapshotMapper()

    # =========================================================================
    # Ingresso
    # =========================================================================

    def registrar_ingresso(
        self,
        ticket_id: str,
        dispositivo: Device,
        cliente: ClientEntity,
        filial: str,
    ) -> RepairTicketEntity:
        """
        Recebe um equipamento e abre o ticket.

        Args:
            ticket_id: ID opaco e único do ticket
            dispositivo: Equipamento recebido
            cliente: Cliente dono do equipamento
            filial: Filial de ingresso

        Returns:
            Ticket criado, em revisão inicial

        Raises:
            ValidationError: Se o ID já existe ou dados inválidos
            ScreeningUnavailableError: Se a triagem falhar
            DeviceFlaggedError: Se série ou IMEI estiver reportado
            PersistenceFailedError: Se o snapshot não puder ser gravado
            LedgerSyncFailedError: Se o registro remoto falhar (ticket já criado)
        """
        if ticket_id in self._tickets:
            raise ValidationError(
                f"Já existe um reparo com o ID {ticket_id}",
                field="ticket_id"
            )

        resultado = self._consultar_triagem(dispositivo)

        if resultado.reportado:
            logger.warning(
                f"Ingress rejected for ticket {ticket_id}: "
                f"serial_flagged={resultado.serie_reportada} imei_flagged={resultado.imei_reportado}"
            )
            raise DeviceFlaggedError(dispositivo.numero_serie, dispositivo.imei)

        ticket = RepairTicketEntity.criar(
            id=ticket_id,
            dispositivo=dispositivo,
            cliente=cliente,
            filial=filial,
        )
        ticket.cliente = self.clientes.registrar(ticket.cliente)
        self._tickets[ticket.id] = ticket
        logger.info(f"Ticket created: {ticket.id} ({ticket.dispositivo.rotulo})")

        self.persistir()
        self._sincronizar(
            lambda: self.ledger.registrar_criacao(ticket.id, ticket.status),
            ticket.id,
        )
        return ticket

    def receber(self, input_dto: IngressoInputDTO) -> RepairTicketEntity:
        """Atalho de registrar_ingresso a partir do DTO de entrada."""
        return self.registrar_ingresso(
            ticket_id=input_dto.ticket_id,
            dispositivo=input_dto.to_device(),
            cliente=input_dto.to_client(),
            filial=input_dto.filial,
        )

    # =========================================================================
    # Consulta
    # =========================================================================

    def obter(self, ticket_id: str) -> RepairTicketEntity:
        """
        Obtém ticket por ID.

        Raises:
            EntityNotFoundError: Se ticket não existe
        """
        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise EntityNotFoundError(
                f"Reparo {ticket_id} não encontrado",
                entity_type="RepairTicket",
                entity_id=ticket_id
            )
        return ticket

    def listar(self) -> List[RepairTicketEntity]:
        """Lista todos os tickets em ordem de inclusão."""
        return list(self._tickets.values())

    def listar_itens(self) -> List[TicketListItemDTO]:
        return [TicketListItemDTO.from_entity(t) for t in self._tickets.values()]

    def listar_resumos(self) -> List[TicketResumoDTO]:
        return resumir_todos(self.listar())

    def resumo(self, ticket_id: str) -> TicketResumoDTO:
        return self.obter(ticket_id).resumo()

    def listar_tecnicos(self) -> List[TechnicianEntity]:
        return self.tecnicos.listar()

    # =========================================================================
    # Mutações com sincronização remota
    # =========================================================================

    def salvar_diagnostico(self, ticket_id: str, diagnostico: Diagnosis) -> RepairTicketEntity:
        """
        Registra o diagnóstico, grava o snapshot e espelha no ledger.

        O ledger recebe o diagnóstico e, em seguida, o novo estado.
        """
        ticket = self.obter(ticket_id)
        ticket.registrar_diagnostico(diagnostico)
        self.persistir()
        self._sincronizar(
            lambda: self.ledger.registrar_diagnostico(ticket.id, diagnostico),
            ticket.id,
        )
        self._sincronizar(
            lambda: self.ledger.registrar_mudanca_estado(
                ticket.id, ticket.status, ticket.historico[-1].nota
            ),
            ticket.id,
        )
        return ticket

    def sincronizar_estado(self, ticket_id: str, nota: str) -> RepairTicketEntity:
        """Grava o snapshot e informa o estado atual ao ledger."""
        ticket = self.obter(ticket_id)
        self.persistir()
        self._sincronizar(
            lambda: self.ledger.registrar_mudanca_estado(ticket.id, ticket.status, nota),
            ticket.id,
        )
        return ticket

    def avancar(
        self,
        ticket_id: str,
        acao: Union[RepairAction, str],
        nota: Optional[str] = None,
    ) -> RepairTicketEntity:
        """
        Executa um comando de etapa e sincroniza o novo estado.

        Args:
            ticket_id: ID do ticket
            acao: RepairAction (ou nome/valor em string)
            nota: Nota enviada ao ledger (default: "Mudança de etapa: <estado>")
        """
        ticket = self.obter(ticket_id)
        ticket.executar(acao)
        logger.info(f"Ticket {ticket.id} moved to {ticket.status.name}")
        return self.sincronizar_estado(
            ticket.id,
            nota or f"Mudança de etapa: {ticket.status.value}",
        )

    # =========================================================================
    # Mutações locais (somente snapshot)
    # =========================================================================

    def registrar_condicoes(
        self,
        ticket_id: str,
        autorizacao: bool,
        sinal: float = 0,
    ) -> RepairTicketEntity:
        ticket = self.obter(ticket_id)
        ticket.registrar_condicoes(autorizacao, sinal)
        self.persistir()
        return ticket

    def atribuir_tecnico(self, ticket_id: str, tecnico_id: str) -> RepairTicketEntity:
        """
        Atribui um técnico do diretório.

        Raises:
            EntityNotFoundError: Se ticket ou técnico não existe
            SkillMismatchError: Se o técnico não repara a marca
        """
        ticket = self.obter(ticket_id)
        tecnico = self.tecnicos.obter(tecnico_id)
        if tecnico is None:
            raise EntityNotFoundError(
                f"Técnico {tecnico_id} não encontrado",
                entity_type="Technician",
                entity_id=tecnico_id
            )
        ticket.atribuir_tecnico(tecnico)
        self.persistir()
        return ticket

    def adicionar_peca(self, ticket_id: str, peca: Part) -> RepairTicketEntity:
        ticket = self.obter(ticket_id)
        ticket.adicionar_peca(peca)
        self.persistir()
        return ticket

    # =========================================================================
    # Persistência
    # =========================================================================

    def persistir(self) -> None:
        """
        Grava o snapshot completo do registro.

        Raises:
            PersistenceFailedError: Se o armazenamento falhar
        """
        records = self._mapper.to_record_list(self.listar())
        try:
            self.store.salvar_snapshot(records)
        except PersistenceFailedError:
            logger.error("Snapshot could not be saved")
            raise
        except Exception as exc:
            logger.exception("Unexpected error saving snapshot")
            raise PersistenceFailedError() from exc
        logger.debug(f"Snapshot saved: {len(records)} tickets")

    def restaurar(self, records: List[TicketRecord]) -> List[RepairTicketEntity]:
        """
        Reconstrói tickets a partir de registros persistidos.

        Não repete a triagem. Os campos do cliente vêm do primeiro registro
        de cada ID e substituem o que o diretório conhecia; todos os tickets
        desse cliente passam a compartilhar essa instância.

        Returns:
            Tickets restaurados, na ordem dos registros
        """
        vistos: Dict[str, ClientEntity] = {}

        def resolver(cliente: ClientEntity) -> ClientEntity:
            if cliente.id not in vistos:
                vistos[cliente.id] = self.clientes.substituir(cliente)
            return vistos[cliente.id]

        restaurados = []
        for record in records:
            ticket = self._mapper.to_entity(record, resolver_cliente=resolver)
            self._tickets[ticket.id] = ticket
            restaurados.append(ticket)

        for ticket in self._tickets.values():
            if ticket.cliente.id in vistos:
                ticket.cliente = vistos[ticket.cliente.id]
        logger.info(f"Restored {len(restaurados)} tickets from snapshot")
        return restaurados

    def carregar(self) -> List[RepairTicketEntity]:
        """Restaura o registro a partir do snapshot do armazenamento."""
        try:
            records = self.store.carregar_snapshot()
        except PersistenceFailedError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error loading snapshot")
            raise PersistenceFailedError("Não foi possível ler os dados salvos") from exc
        return self.restaurar(records)

    # =========================================================================
    # Sessão
    # =========================================================================

    def selecionar(self, ticket_id: str) -> RepairTicketEntity:
        """Marca o ticket como selecionado (persistido entre reinícios)."""
        ticket = self.obter(ticket_id)
        self._no_armazenamento(lambda: self.store.salvar_id_selecionado(ticket.id), "saving selection")
        return ticket

    def ticket_selecionado(self) -> Optional[RepairTicketEntity]:
        """Ticket selecionado, ou None se não há seleção válida."""
        ticket_id = self._no_armazenamento(self.store.carregar_id_selecionado, "loading selection")
        if not ticket_id:
            return None
        return self._tickets.get(ticket_id)

    def limpar(self) -> None:
        """Apaga o armazenamento e esvazia o registro e o diretório de clientes."""
        self._no_armazenamento(self.store.limpar, "clearing store")
        self._tickets.clear()
        self.clientes.limpar()
        logger.info("Registry cleared")

    # =========================================================================
    # Colaboradores externos
    # =========================================================================

    def _no_armazenamento(self, operacao: Callable[[], T], descricao: str) -> T:
        try:
            return operacao()
        except PersistenceFailedError:
            logger.error(f"Durable store failed while {descricao}")
            raise
        except Exception as exc:
            logger.exception(f"Unexpected error while {descricao}")
            raise PersistenceFailedError() from exc

    def _consultar_triagem(self, dispositivo: Device):
        try:
            return self.gateway.consultar(dispositivo.numero_serie, dispositivo.imei)
        except ScreeningUnavailableError:
            logger.error(f"Screening unavailable for serial {dispositivo.numero_serie}")
            raise
        except Exception as exc:
            logger.exception("Unexpected error while screening device")
            raise ScreeningUnavailableError() from exc

    def _sincronizar(self, operacao: Callable[[], None], ticket_id: str) -> None:
        try:
            operacao()
        except LedgerSyncFailedError:
            logger.warning(f"Ledger sync failed for ticket {ticket_id}; local state kept")
            raise
        except Exception as exc:
            logger.warning(f"Ledger sync failed for ticket {ticket_id}; local state kept")
            raise LedgerSyncFailedError() from exc

    def __len__(self) -> int:
        return len(self._tickets)

    def __contains__(self, ticket_id: object) -> bool:
        return ticket_id in self._tickets
