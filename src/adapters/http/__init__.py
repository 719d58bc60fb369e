"""
Adapters HTTP (httpx) para os serviços externos do registro de reparos.

- HttpScreeningGateway: Triagem de série/IMEI reportados
- HttpRemoteLedger: Registro remoto de criação, diagnóstico e estados
"""

from .client import JsonHttpClient, HttpRequestError
from .screening import HttpScreeningGateway
from .ledger import HttpRemoteLedger

__all__ = [
    "JsonHttpClient",
    "HttpRequestError",
    "HttpScreeningGateway",
    "HttpRemoteLedger",
]
