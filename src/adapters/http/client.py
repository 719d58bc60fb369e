"""
Cliente JSON mínimo sobre httpx.

Centraliza URL base, timeout e o tratamento de falhas de transporte
e de status, devolvendo o corpo JSON já decodificado.
"""

from typing import Any, Mapping, Optional
import logging

import httpx

logger = logging.getLogger(__name__)


class HttpRequestError(RuntimeError):
    """Falha numa chamada HTTP (transporte, status >= 400 ou corpo inválido)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        prefix = f"[{self.status_code}] " if self.status_code is not None else ""
        return f"{prefix}{super().__str__()}"


def _extract_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or "Erro desconhecido no servidor"

    if isinstance(data, Mapping):
        for chave in ("error", "detail", "message"):
            if isinstance(data.get(chave), str):
                return data[chave]
    return "Falha ao processar a requisição"


class JsonHttpClient:
    """
    Cliente HTTP síncrono que troca JSON com um serviço.

    Args:
        base_url: URL base do serviço
        timeout: Timeout em segundos por requisição
        client: httpx.Client já configurado (ex.: com MockTransport em testes)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._build_url(path)
        headers = {"Accept": "application/json"}
        headers.update(kwargs.pop("headers", {}))

        logger.debug(f"HTTP {method} {url}")
        try:
            response = self._client.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except httpx.HTTPError as exc:
            logger.error(f"HTTP {method} {url} failed: {exc}")
            raise HttpRequestError(f"Falha na requisição: {exc}") from exc

        if response.status_code >= 400:
            message = _extract_error_message(response)
            logger.error(f"HTTP {method} {url} returned {response.status_code}: {message}")
            raise HttpRequestError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise HttpRequestError(
                "Resposta não é JSON válido", status_code=response.status_code
            ) from exc

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def close(self) -> None:
        self._client.close()

    def _build_url(self, path: str) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url.rstrip('/')}{normalized}"
