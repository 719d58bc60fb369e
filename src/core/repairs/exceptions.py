"""
Exceções específicas do domínio de Reparos.

Cada erro carrega uma mensagem pronta para exibição ao usuário.

Hierarquia:
    ValidationError
    └── InvalidAmountError
    BusinessRuleViolationError
    ├── DeviceFlaggedError
    ├── SkillMismatchError
    ├── MissingDiagnosisError
    ├── MissingAuthorizationError
    ├── InsufficientDepositError
    ├── NoTechnicianAssignedError
    └── InvalidTransitionError
    IntegrationError
    ├── ScreeningUnavailableError
    ├── LedgerSyncFailedError
    └── PersistenceFailedError
"""

from src.core.shared.exceptions import (
    ValidationError,
    BusinessRuleViolationError,
    IntegrationError,
)


class InvalidAmountError(ValidationError):
    """Valor monetário não positivo ou não numérico."""

    def __init__(self, message: str = "O sinal deve ser maior que zero", field: str = "valor"):
        super().__init__(message, field=field)


class DeviceFlaggedError(BusinessRuleViolationError):
    """Equipamento com série ou IMEI reportado como roubado/bloqueado."""

    def __init__(self, numero_serie: str, imei: str):
        self.numero_serie = numero_serie
        self.imei = imei
        super().__init__(
            "Equipamento recusado: série ou IMEI reportado",
            rule="equipamento_reportado",
        )


class SkillMismatchError(BusinessRuleViolationError):
    """Técnico sem especialidade na marca do equipamento."""

    def __init__(self, tecnico_nome: str, marca: str):
        self.tecnico_nome = tecnico_nome
        self.marca = marca
        super().__init__(
            f"O técnico {tecnico_nome} não tem especialidade na marca {marca}",
            rule="tecnico_sem_especialidade",
        )


class MissingDiagnosisError(BusinessRuleViolationError):

    def __init__(self):
        super().__init__(
            "Falta o diagnóstico inicial",
            rule="diagnostico_obrigatorio",
        )


class MissingAuthorizationError(BusinessRuleViolationError):

    def __init__(self):
        super().__init__(
            "Falta a autorização escrita do cliente",
            rule="autorizacao_obrigatoria",
        )


class InsufficientDepositError(BusinessRuleViolationError):
    """Sinal abaixo de 50% do custo estimado."""

    def __init__(self, minimo: float, atual: float):
        self.minimo = minimo
        self.atual = atual
        super().__init__(
            f"Sinal insuficiente. Mínimo exigido: R$ {minimo:.2f} (pago: R$ {atual:.2f})",
            rule="sinal_minimo",
        )


class NoTechnicianAssignedError(BusinessRuleViolationError):

    def __init__(self):
        super().__init__(
            "Não é possível iniciar: nenhum técnico atribuído",
            rule="tecnico_obrigatorio",
        )


class InvalidTransitionError(BusinessRuleViolationError):
    """Transição fora da sequência do fluxo de reparo."""

    def __init__(self, message: str, rule: str = "transicao_estado_invalida"):
        super().__init__(message, rule=rule)


class ScreeningUnavailableError(IntegrationError):

    def __init__(self, message: str = "Não foi possível validar se o equipamento é reportado"):
        super().__init__(message, service="triagem")


class LedgerSyncFailedError(IntegrationError):

    def __init__(self, message: str = "Não foi possível sincronizar com o registro remoto"):
        super().__init__(message, service="ledger")


class PersistenceFailedError(IntegrationError):

    def __init__(self, message: str = "Não foi possível salvar os dados localmente"):
        super().__init__(message, service="armazenamento")
