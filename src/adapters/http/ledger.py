"""
Registro remoto HTTP.

Endpoints:
    POST  /reparaciones  {id, estado}
    POST  /diagnosticos  {id, diagnostico}
    PATCH /estados       {id, estado, nota}
"""

from typing import Any, Mapping

from src.core.repairs.entities import RepairStatus
from src.core.repairs.exceptions import LedgerSyncFailedError
from src.core.repairs.value_objects import Diagnosis

from .client import HttpRequestError, JsonHttpClient


class HttpRemoteLedger:
    """Implementação HTTP do RemoteLedger."""

    def __init__(self, client: JsonHttpClient):
        self.client = client

    def registrar_criacao(self, ticket_id: str, estado: RepairStatus) -> None:
        self._enviar("POST", "/reparaciones", {"id": ticket_id, "estado": estado.value})

    def registrar_diagnostico(self, ticket_id: str, diagnostico: Diagnosis) -> None:
        self._enviar("POST", "/diagnosticos", {
            "id": ticket_id,
            "diagnostico": diagnostico.to_dict(),
        })

    def registrar_mudanca_estado(self, ticket_id: str, estado: RepairStatus, nota: str) -> None:
        self._enviar("PATCH", "/estados", {
            "id": ticket_id,
            "estado": estado.value,
            "nota": nota,
        })

    def _enviar(self, method: str, path: str, payload: Mapping[str, Any]) -> None:
        try:
            self.client.request(method, path, json=dict(payload))
        except HttpRequestError as exc:
            raise LedgerSyncFailedError(
                f"Falha ao sincronizar {path}: {exc}"
            ) from exc
