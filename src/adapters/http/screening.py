"""
Gateway HTTP de triagem de equipamentos reportados.

Endpoint:
    GET /equipos/reportes?serie=<serie>&imei=<imei>
    → {"serieReportada": bool, "imeiReportado": bool}
"""

from typing import Any
import logging

from src.core.repairs.exceptions import ScreeningUnavailableError
from src.core.repairs.ports import ResultadoTriagem

from .client import HttpRequestError, JsonHttpClient

logger = logging.getLogger(__name__)


class HttpScreeningGateway:
    """Implementação HTTP do ScreeningGateway."""

    PATH = "/equipos/reportes"

    def __init__(self, client: JsonHttpClient):
        self.client = client

    def consultar(self, numero_serie: str, imei: str) -> ResultadoTriagem:
        try:
            data = self.client.get(self.PATH, params={"serie": numero_serie, "imei": imei})
        except HttpRequestError as exc:
            raise ScreeningUnavailableError(
                f"Não foi possível validar o equipamento: {exc}"
            ) from exc
        return self._parse(data)

    @staticmethod
    def _parse(data: Any) -> ResultadoTriagem:
        if not isinstance(data, dict):
            raise ScreeningUnavailableError("Resposta inválida do serviço de triagem")

        serie = data.get("serieReportada")
        imei = data.get("imeiReportado")
        if not isinstance(serie, bool) or not isinstance(imei, bool):
            logger.error(f"Malformed screening response: {data}")
            raise ScreeningUnavailableError("Resposta inválida do serviço de triagem")

        return ResultadoTriagem(serie_reportada=serie, imei_reportado=imei)
