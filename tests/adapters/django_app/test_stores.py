"""
Testes do DjangoDurableStore (Django ORM + SQLite em memória).
"""

import pytest
from unittest.mock import patch

from django.db import DatabaseError

from src.core.repairs import (
    Diagnosis,
    RepairAction,
    TicketRegistry,
    TicketSnapshotMapper,
)
from src.core.repairs.exceptions import PersistenceFailedError


def _record(ticket_id, status="EM_REVISAO_INICIAL"):
    return {
        "id": ticket_id,
        "dispositivo": {"numero_serie": "SN", "imei": "IMEI", "marca": "Samsung", "modelo": "S22"},
        "cliente": {"id": "C1", "nome": "Ana Torres", "autorizacao_escrita": False},
        "filial": "Centro",
        "diagnostico": None,
        "total_sinal": 0,
        "tecnico": None,
        "pecas": [],
        "status": status,
        "historico": [],
    }


class TestDjangoDurableStore:

    def test_snapshot_vazio(self, django_store):
        assert django_store.carregar_snapshot() == []

    def test_salvar_e_carregar_preserva_ordem(self, django_store):
        records = [_record("REP-2"), _record("REP-1"), _record("REP-3")]

        django_store.salvar_snapshot(records)

        assert django_store.carregar_snapshot() == records

    def test_salvar_substitui_snapshot(self, django_store):
        from src.adapters.django_app.repairs.models import TicketSnapshotModel

        django_store.salvar_snapshot([_record("REP-1"), _record("REP-2")])
        django_store.salvar_snapshot([_record("REP-2", status="EM_REPARO")])

        assert TicketSnapshotModel.objects.count() == 1
        assert django_store.carregar_snapshot()[0]["status"] == "EM_REPARO"

    def test_id_selecionado(self, django_store):
        assert django_store.carregar_id_selecionado() is None

        django_store.salvar_id_selecionado("REP-1")
        django_store.salvar_id_selecionado("REP-2")

        assert django_store.carregar_id_selecionado() == "REP-2"

    def test_limpar(self, django_store):
        django_store.salvar_snapshot([_record("REP-1")])
        django_store.salvar_id_selecionado("REP-1")

        django_store.limpar()

        assert django_store.carregar_snapshot() == []
        assert django_store.carregar_id_selecionado() is None

    def test_erro_de_banco_vira_persistence_failed(self, django_store):
        from src.adapters.django_app.repairs.models import TicketSnapshotModel

        with patch.object(
            TicketSnapshotModel.objects,
            'bulk_create',
            side_effect=DatabaseError("disk I/O error"),
        ):
            with pytest.raises(PersistenceFailedError):
                django_store.salvar_snapshot([_record("REP-1")])

    def test_erro_de_banco_ao_limpar_vira_persistence_failed(self, django_store):
        from src.adapters.django_app.repairs.models import TicketSnapshotModel

        with patch.object(
            TicketSnapshotModel.objects,
            'all',
            side_effect=DatabaseError("database is locked"),
        ):
            with pytest.raises(PersistenceFailedError):
                django_store.limpar()

    def test_erro_de_banco_ao_ler_selecao_vira_persistence_failed(self, django_store):
        from src.adapters.django_app.repairs.models import PreferenceModel

        with patch.object(
            PreferenceModel.objects,
            'filter',
            side_effect=DatabaseError("disk I/O error"),
        ):
            with pytest.raises(PersistenceFailedError):
                django_store.carregar_id_selecionado()


class TestRegistryComDjango:
    """Registro completo sobre o armazenamento Django."""

    def test_restaurar_apos_reinicio(self, django_store, gateway, ledger, tecnicos, device, cliente):
        registry = TicketRegistry(gateway, ledger, django_store, tecnicos=tecnicos)
        registry.registrar_ingresso("REP-0001", device, cliente, "Filial Centro")
        registry.salvar_diagnostico("REP-0001", Diagnosis("Tela quebrada", 500))
        registry.registrar_condicoes("REP-0001", autorizacao=True, sinal=250)
        registry.atribuir_tecnico("REP-0001", "T1")
        registry.avancar("REP-0001", RepairAction.INICIAR)
        registry.selecionar("REP-0001")

        novo = TicketRegistry(gateway, ledger, django_store, tecnicos=tecnicos)
        novo.carregar()

        mapper = TicketSnapshotMapper()
        assert mapper.to_record_list(novo.listar()) == mapper.to_record_list(registry.listar())
        assert novo.ticket_selecionado().id == "REP-0001"
