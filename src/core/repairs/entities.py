"""
Entidades do Domínio de Reparos.

Este módulo define as entidades de domínio que encapsulam
regras de negócio de um caso de reparo de equipamento.

Entidades:
- RepairTicketEntity: Agregado principal do domínio
- RepairStatus: Estados do fluxo de reparo
- RepairAction: Comandos de avanço de etapa
- ClientEntity: Cliente dono do equipamento
- TechnicianEntity: Técnico e suas especialidades por marca
- HistoryEntry: Registro imutável de mudança de estado

Regras de Negócio Encapsuladas:
- Fluxo de estados estritamente para frente
- Diagnóstico, autorização escrita, sinal mínimo e técnico
  obrigatórios para iniciar o reparo
- Técnico deve ter especialidade na marca do equipamento
- Histórico somente de inclusão
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar, FrozenSet, Iterable, List, Optional

from src.core.shared.exceptions import ValidationError

from .exceptions import (
    InvalidAmountError,
    InvalidTransitionError,
    InsufficientDepositError,
    MissingAuthorizationError,
    MissingDiagnosisError,
    NoTechnicianAssignedError,
    SkillMismatchError,
)
from .value_objects import Device, Diagnosis, Part


def _pagamento_valido(valor) -> bool:
    if isinstance(valor, bool) or not isinstance(valor, (int, float)):
        return False
    return valor > 0 and math.isfinite(valor)


class RepairStatus(Enum):
    """
    Estados possíveis de um ticket de reparo.

    Fluxo de Estados (sem retorno nem cancelamento):
        RECEBIDO → EM_REVISAO_INICIAL → AGUARDANDO_AUTORIZACAO_E_SINAL
            → EM_REPARO → EM_CONTROLE_QUALIDADE → PRONTO_PARA_ENTREGA
            → ENTREGUE
    """

    RECEBIDO = "Recebido"
    EM_REVISAO_INICIAL = "Em Revisão Inicial"
    AGUARDANDO_AUTORIZACAO_E_SINAL = "Aguardando Autorização e Sinal"
    EM_REPARO = "Em Reparo"
    EM_CONTROLE_QUALIDADE = "Em Controle de Qualidade"
    PRONTO_PARA_ENTREGA = "Pronto para Entrega"
    ENTREGUE = "Entregue"

    @classmethod
    def from_string(cls, value: str) -> "RepairStatus":
        """
        Converte string para enum.

        Args:
            value: Valor string (nome ou valor do enum)

        Returns:
            RepairStatus correspondente

        Raises:
            ValueError: Se valor inválido
        """
        # Tenta pelo nome (EM_REPARO)
        try:
            return cls[value.upper().replace(" ", "_")]
        except KeyError:
            pass

        # Tenta pelo valor ("Em Reparo")
        for status in cls:
            if status.value.lower() == value.lower():
                return status

        raise ValueError(f"Status inválido: {value}")

    @property
    def ordem(self) -> int:
        """Posição do estado na sequência do fluxo."""
        return list(RepairStatus).index(self)


class RepairAction(Enum):
    """
    Comandos de avanço de etapa após o início do fluxo.

    Conjunto fechado: cada comando corresponde a exatamente um
    método de transição do RepairTicketEntity.
    """

    INICIAR = "iniciar"
    CONTROLE_QUALIDADE = "controle_qualidade"
    PRONTO_PARA_ENTREGA = "pronto_para_entrega"
    ENTREGAR = "entregar"

    @classmethod
    def from_string(cls, value: str) -> "RepairAction":
        """
        Converte string (nome ou valor) para comando.

        Raises:
            ValidationError: Se o comando não existe
        """
        normalizado = (value or "").strip().lower().replace(" ", "_")
        for acao in cls:
            if acao.value == normalizado or acao.name.lower() == normalizado:
                return acao
        raise ValidationError(f"Ação inválida: {value}", field="acao")


@dataclass(frozen=True)
class HistoryEntry:
    """Entrada do histórico de estados de um ticket."""

    estado: RepairStatus
    nota: str
    registrado_em: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "estado": self.estado.name,
            "nota": self.nota,
            "registrado_em": self.registrado_em.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        return cls(
            estado=RepairStatus.from_string(data["estado"]),
            nota=data.get("nota", ""),
            registrado_em=datetime.fromisoformat(data["registrado_em"]),
        )


@dataclass
class ClientEntity:
    """
    Cliente dono do equipamento.

    A autorização escrita só muda de False para True; assinar de novo
    não tem efeito e não existe operação para revogar.
    """

    id: str
    nome: str
    autorizacao_escrita: bool = False

    @classmethod
    def criar(cls, id: str, nome: str, autorizacao_escrita: bool = False) -> "ClientEntity":
        if not id or not str(id).strip():
            raise ValidationError("ID do cliente é obrigatório", field="cliente_id")
        if not nome or not str(nome).strip():
            raise ValidationError("Nome do cliente é obrigatório", field="nome")
        return cls(id=str(id).strip(), nome=nome.strip(), autorizacao_escrita=bool(autorizacao_escrita))

    def assinar_autorizacao(self) -> None:
        self.autorizacao_escrita = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "autorizacao_escrita": self.autorizacao_escrita,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClientEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class TechnicianEntity:
    """Técnico e o conjunto de marcas que ele sabe reparar."""

    id: str
    nome: str
    especialidades: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def criar(cls, id: str, nome: str, especialidades: Iterable[str] = ()) -> "TechnicianEntity":
        if not id or not str(id).strip():
            raise ValidationError("ID do técnico é obrigatório", field="tecnico_id")
        if not nome or not str(nome).strip():
            raise ValidationError("Nome do técnico é obrigatório", field="nome")
        return cls(
            id=str(id).strip(),
            nome=nome.strip(),
            especialidades=frozenset(m.strip() for m in especialidades if m and m.strip()),
        )

    def pode_reparar(self, marca: str) -> bool:
        return marca in self.especialidades

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "especialidades": sorted(self.especialidades),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TechnicianEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class RepairTicketEntity:
    """
    Entidade de Domínio: Ticket de Reparo.

    Agregado principal do domínio. É o único objeto que altera o estado
    do fluxo de reparo; toda regra é validada antes de qualquer mutação.

    Invariantes:
    - status é sempre um dos sete estados do fluxo
    - o último item do histórico tem o mesmo estado que status
    - histórico só cresce (nunca reordenado nem truncado)
    - total_sinal nunca diminui
    - técnico atribuído tinha a marca do equipamento no momento da atribuição

    Attributes:
        id: Identificador opaco do ticket
        dispositivo: Equipamento em reparo
        cliente: Referência compartilhada ao cliente (não pertence ao ticket)
        filial: Filial que recebeu o equipamento
        diagnostico: Diagnóstico inicial (opcional até ser registrado)
        tecnico: Técnico atribuído (opcional)
        pecas: Peças adicionadas, em ordem
        total_sinal: Soma dos sinais pagos
        status: Estado atual
        historico: Linha do tempo de estados

    Example:
        ticket = RepairTicketEntity.criar(
            id="REP-0001",
            dispositivo=Device("SERIE-OK-123", "IMEI-OK-456", "Samsung", "S22"),
            cliente=ClientEntity.criar("C1", "Ana Torres"),
            filial="Filial Centro",
        )
        ticket.registrar_diagnostico(Diagnosis("Tela quebrada", 500))
    """

    id: str
    dispositivo: Device
    cliente: ClientEntity
    filial: str
    diagnostico: Optional[Diagnosis] = None
    tecnico: Optional[TechnicianEntity] = None
    pecas: List[Part] = field(default_factory=list)
    total_sinal: float = 0
    status: RepairStatus = RepairStatus.RECEBIDO
    historico: List[HistoryEntry] = field(default_factory=list)

    # Percentual do custo estimado exigido como sinal
    PERCENTUAL_SINAL_MINIMO: ClassVar[float] = 0.5

    # Estados a partir dos quais um novo diagnóstico ainda é aceito
    ESTADOS_DIAGNOSTICO = (
        RepairStatus.EM_REVISAO_INICIAL,
        RepairStatus.AGUARDANDO_AUTORIZACAO_E_SINAL,
    )

    @classmethod
    def criar(
        cls,
        id: str,
        dispositivo: Device,
        cliente: ClientEntity,
        filial: str,
    ) -> "RepairTicketEntity":
        """
        Factory method para abrir um ticket já aprovado na triagem.

        O ticket nasce recebido e é enviado imediatamente para a
        revisão inicial; o histórico registra as duas etapas.

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        if not id or not str(id).strip():
            raise ValidationError("ID do ticket é obrigatório", field="ticket_id")
        if not isinstance(dispositivo, Device):
            raise ValidationError("Equipamento inválido", field="dispositivo")
        if not isinstance(cliente, ClientEntity):
            raise ValidationError("Cliente inválido", field="cliente")
        if not filial or not filial.strip():
            raise ValidationError("Filial é obrigatória", field="filial")

        ticket = cls(
            id=str(id).strip(),
            dispositivo=dispositivo,
            cliente=cliente,
            filial=filial.strip(),
        )
        ticket.historico.append(HistoryEntry(RepairStatus.RECEBIDO, "Equipamento recebido"))
        ticket._mudar_estado(
            RepairStatus.EM_REVISAO_INICIAL,
            "Equipamento enviado para revisão inicial",
        )
        return ticket

    # =========================================================================
    # Condições do serviço
    # =========================================================================

    def registrar_diagnostico(self, diagnostico: Diagnosis) -> None:
        """
        Registra o diagnóstico inicial e aguarda autorização e sinal.

        Um novo diagnóstico substitui o anterior apenas enquanto o reparo
        não começou.

        Raises:
            ValidationError: Se o diagnóstico não é um Diagnosis
            InvalidTransitionError: Se o reparo já foi iniciado
        """
        if not isinstance(diagnostico, Diagnosis):
            raise ValidationError("O diagnóstico inicial é inválido", field="diagnostico")

        if self.status not in self.ESTADOS_DIAGNOSTICO:
            raise InvalidTransitionError(
                f"Não é possível registrar diagnóstico no estado '{self.status.value}'",
                rule="diagnostico_apos_inicio",
            )

        self.diagnostico = diagnostico
        self._mudar_estado(
            RepairStatus.AGUARDANDO_AUTORIZACAO_E_SINAL,
            "Diagnóstico inicial registrado",
        )

    def adicionar_sinal(self, valor: float) -> None:
        """
        Soma um pagamento ao sinal. Não altera o estado.

        Raises:
            InvalidAmountError: Se valor não é numérico ou não é positivo
        """
        if not _pagamento_valido(valor):
            raise InvalidAmountError()
        self.total_sinal += valor

    def registrar_autorizacao(self, concedida: bool) -> None:
        """Marca a autorização escrita do cliente; False não revoga."""
        if concedida:
            self.cliente.assinar_autorizacao()

    def registrar_condicoes(self, autorizacao: bool, sinal: float = 0) -> None:
        """
        Registra autorização e sinal numa única operação.

        Sinal zero significa "sem pagamento agora". Sinal negativo é
        rejeitado antes de qualquer alteração.
        """
        if sinal:
            if not _pagamento_valido(sinal):
                raise InvalidAmountError()
        self.registrar_autorizacao(autorizacao)
        if sinal:
            self.adicionar_sinal(sinal)

    def atribuir_tecnico(self, tecnico: TechnicianEntity) -> None:
        """
        Atribui técnico com especialidade na marca do equipamento.

        Não gera entrada no histórico: atribuição não é mudança de estado.

        Raises:
            ValidationError: Se tecnico não é um TechnicianEntity
            SkillMismatchError: Se o técnico não repara a marca
        """
        if not isinstance(tecnico, TechnicianEntity):
            raise ValidationError("Técnico inválido", field="tecnico")
        if not tecnico.pode_reparar(self.dispositivo.marca):
            raise SkillMismatchError(tecnico.nome, self.dispositivo.marca)
        self.tecnico = tecnico

    def adicionar_peca(self, peca: Part) -> None:
        if not isinstance(peca, Part):
            raise ValidationError("Peça inválida", field="peca")
        self.pecas.append(peca)

    # =========================================================================
    # Transições do fluxo
    # =========================================================================

    def iniciar_reparo(self) -> None:
        """
        Inicia o reparo.

        Regras (verificadas nesta ordem):
        - Diagnóstico registrado
        - Autorização escrita do cliente
        - Sinal >= 50% do custo estimado do diagnóstico
        - Técnico atribuído
        - Ticket aguardando autorização e sinal

        Raises:
            MissingDiagnosisError, MissingAuthorizationError,
            InsufficientDepositError, NoTechnicianAssignedError,
            InvalidTransitionError
        """
        if self.diagnostico is None:
            raise MissingDiagnosisError()

        if not self.cliente.autorizacao_escrita:
            raise MissingAuthorizationError()

        minimo = self.sinal_minimo
        if self.total_sinal < minimo:
            raise InsufficientDepositError(minimo, self.total_sinal)

        if self.tecnico is None:
            raise NoTechnicianAssignedError()

        self._exigir_estado(
            RepairStatus.AGUARDANDO_AUTORIZACAO_E_SINAL,
            "O reparo só pode ser iniciado a partir de 'Aguardando Autorização e Sinal'",
        )
        self._mudar_estado(RepairStatus.EM_REPARO, "Reparo iniciado")

    def enviar_para_controle_qualidade(self) -> None:
        self._exigir_estado(
            RepairStatus.EM_REPARO,
            "Só é possível ir para controle de qualidade a partir de 'Em Reparo'",
        )
        self._mudar_estado(RepairStatus.EM_CONTROLE_QUALIDADE, "Equipamento em controle de qualidade")

    def marcar_pronto_para_entrega(self) -> None:
        self._exigir_estado(
            RepairStatus.EM_CONTROLE_QUALIDADE,
            "Só é possível marcar como pronto a partir do controle de qualidade",
        )
        self._mudar_estado(RepairStatus.PRONTO_PARA_ENTREGA, "Equipamento pronto para entrega")

    def entregar(self) -> None:
        self._exigir_estado(
            RepairStatus.PRONTO_PARA_ENTREGA,
            "Só é possível entregar um equipamento 'Pronto para Entrega'",
        )
        self._mudar_estado(RepairStatus.ENTREGUE, "Equipamento entregue ao cliente")

    def executar(self, acao: RepairAction) -> None:
        """
        Executa um comando de avanço de etapa.

        Args:
            acao: RepairAction (ou seu nome/valor em string)
        """
        if not isinstance(acao, RepairAction):
            acao = RepairAction.from_string(acao)

        transicoes = {
            RepairAction.INICIAR: self.iniciar_reparo,
            RepairAction.CONTROLE_QUALIDADE: self.enviar_para_controle_qualidade,
            RepairAction.PRONTO_PARA_ENTREGA: self.marcar_pronto_para_entrega,
            RepairAction.ENTREGAR: self.entregar,
        }
        transicoes[acao]()

    # =========================================================================
    # Projeções
    # =========================================================================

    @property
    def custo_estimado(self) -> float:
        return self.diagnostico.custo_estimado if self.diagnostico else 0

    @property
    def sinal_minimo(self) -> float:
        """Sinal exigido, fixado pelo custo estimado do diagnóstico."""
        return self.custo_estimado * self.PERCENTUAL_SINAL_MINIMO

    @property
    def custo_pecas(self) -> float:
        return sum(p.custo for p in self.pecas)

    @property
    def esta_entregue(self) -> bool:
        return self.status == RepairStatus.ENTREGUE

    def resumo(self):
        """
        Projeção somente leitura para exibição/exportação.

        Returns:
            TicketResumoDTO
        """
        from .dtos import TicketResumoDTO

        return TicketResumoDTO.from_entity(self)

    def _exigir_estado(self, esperado: RepairStatus, mensagem: str) -> None:
        if self.status != esperado:
            raise InvalidTransitionError(f"{mensagem} (estado atual: '{self.status.value}')")

    def _mudar_estado(self, novo_status: RepairStatus, nota: str) -> None:
        self.status = novo_status
        self.historico.append(HistoryEntry(novo_status, nota))

    def __repr__(self) -> str:
        """Representação string para debugging."""
        return (
            f"RepairTicketEntity("
            f"id={self.id}, "
            f"dispositivo='{self.dispositivo.rotulo}', "
            f"status={self.status.value}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, RepairTicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash baseado em ID."""
        return hash(self.id)
