"""Value Objects do domínio de Reparos: imutáveis, comparados por valor."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.core.shared.exceptions import ValidationError


def _texto_obrigatorio(instancia: Any, campo: str, rotulo: str) -> None:
    """Valida e normaliza (strip) um campo texto de um dataclass congelado."""
    valor = getattr(instancia, campo)
    if not isinstance(valor, str) or not valor.strip():
        raise ValidationError(f"{rotulo} é obrigatório", field=campo)
    object.__setattr__(instancia, campo, valor.strip())


def _valor_nao_negativo(valor: Any, campo: str, rotulo: str) -> float:
    if isinstance(valor, bool) or not isinstance(valor, (int, float)) or not math.isfinite(valor):
        raise ValidationError(f"{rotulo} deve ser numérico", field=campo)
    if valor < 0:
        raise ValidationError(f"{rotulo} não pode ser negativo", field=campo)
    return valor


@dataclass(frozen=True)
class Device:
    """
    Equipamento recebido para reparo.

    Os quatro campos são obrigatórios e o objeto não muda após criado.
    """
    numero_serie: str
    imei: str
    marca: str
    modelo: str

    def __post_init__(self):
        _texto_obrigatorio(self, "numero_serie", "Número de série")
        _texto_obrigatorio(self, "imei", "IMEI")
        _texto_obrigatorio(self, "marca", "Marca")
        _texto_obrigatorio(self, "modelo", "Modelo")

    @property
    def rotulo(self) -> str:
        return f"{self.marca} {self.modelo}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "numero_serie": self.numero_serie,
            "imei": self.imei,
            "marca": self.marca,
            "modelo": self.modelo,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Device":
        return cls(
            numero_serie=data.get("numero_serie", ""),
            imei=data.get("imei", ""),
            marca=data.get("marca", ""),
            modelo=data.get("modelo", ""),
        )


@dataclass(frozen=True)
class Part:
    """Peça de reposição usada no reparo."""
    codigo: str
    nome: str
    custo: float

    def __post_init__(self):
        _texto_obrigatorio(self, "codigo", "Código da peça")
        _texto_obrigatorio(self, "nome", "Nome da peça")
        _valor_nao_negativo(self.custo, "custo", "Custo da peça")

    def to_dict(self) -> dict[str, Any]:
        return {"codigo": self.codigo, "nome": self.nome, "custo": self.custo}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Part":
        return cls(
            codigo=data.get("codigo", ""),
            nome=data.get("nome", ""),
            custo=data.get("custo", 0),
        )


@dataclass(frozen=True)
class Diagnosis:
    """
    Diagnóstico inicial: descrição do problema e custo estimado.

    O custo estimado define o sinal mínimo (50%) para iniciar o reparo.
    """
    descricao: str
    custo_estimado: float
    registrado_em: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        _texto_obrigatorio(self, "descricao", "Descrição do diagnóstico")
        _valor_nao_negativo(self.custo_estimado, "custo_estimado", "Custo estimado")

    def to_dict(self) -> dict[str, Any]:
        return {
            "descricao": self.descricao,
            "custo_estimado": self.custo_estimado,
            "registrado_em": self.registrado_em.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Diagnosis":
        return cls(
            descricao=data.get("descricao", ""),
            custo_estimado=data.get("custo_estimado", 0),
            registrado_em=datetime.fromisoformat(data["registrado_em"]) if data.get("registrado_em") else datetime.now(),
        )

