"""
Testes Unitários para o TicketRegistry.

Estratégia de Teste:
- Usa implementações InMemory (fakes) dos ports
- Mock apenas para colaboradores que falham de forma inesperada
- Verifica a ordem dos efeitos: mutação local, snapshot, ledger

Coverage:
- Ingresso com triagem (aprovado, reportado, indisponível)
- Consulta e listagem
- Diagnóstico, condições, técnico, peças, avanço de etapa
- Persistência, restauração e seleção
- Falhas do ledger e do armazenamento
"""

import pytest
from unittest.mock import Mock

from src.core.repairs import (
    ClientEntity,
    Device,
    Diagnosis,
    IngressoInputDTO,
    InMemoryDurableStore,
    Part,
    RepairAction,
    RepairStatus,
    TicketRegistry,
    TicketSnapshotMapper,
)
from src.core.repairs.exceptions import (
    DeviceFlaggedError,
    InsufficientDepositError,
    LedgerSyncFailedError,
    MissingAuthorizationError,
    PersistenceFailedError,
    ScreeningUnavailableError,
    SkillMismatchError,
)
from src.core.shared.exceptions import EntityNotFoundError, ValidationError


def _ingressar(registry, ticket_id="REP-0001", serie="SERIE-OK-123", imei="IMEI-OK-456",
               marca="Samsung", cliente_id="C1"):
    return registry.registrar_ingresso(
        ticket_id,
        Device(serie, imei, marca, "S22"),
        ClientEntity.criar(cliente_id, "Ana Torres"),
        "Filial Centro",
    )


def _preparar(registry, ticket_id="REP-0001"):
    """Leva o ticket até as condições para iniciar o reparo."""
    _ingressar(registry, ticket_id)
    registry.salvar_diagnostico(ticket_id, Diagnosis("Tela quebrada", 500))
    registry.registrar_condicoes(ticket_id, autorizacao=True, sinal=250)
    registry.atribuir_tecnico(ticket_id, "T1")


class TestIngresso:
    """Testes do registrar_ingresso."""

    def test_ingresso_aprovado(self, registry, gateway, ledger, store):
        ticket = _ingressar(registry)

        assert ticket.status == RepairStatus.EM_REVISAO_INICIAL
        assert registry.obter("REP-0001") is ticket
        assert gateway.consultas == [("SERIE-OK-123", "IMEI-OK-456")]
        assert store.gravacoes == 1
        assert ledger.chamadas == [
            ("criacao", {"id": "REP-0001", "estado": "Em Revisão Inicial"}),
        ]

    @pytest.mark.parametrize("serie,imei", [
        ("SERIE-REPORTADA-001", "IMEI-OK-456"),
        ("BLOCK-SERIE-88", "IMEI-OK-456"),
        ("SERIE-OK-123", "IMEI-REPORTADO-999"),
        ("SERIE-OK-123", "000000000000000"),
    ])
    def test_equipamento_reportado_e_recusado(self, registry, ledger, store, serie, imei):
        with pytest.raises(DeviceFlaggedError):
            _ingressar(registry, serie=serie, imei=imei)

        assert len(registry) == 0
        assert store.gravacoes == 0
        assert ledger.chamadas == []

    def test_triagem_indisponivel(self, registry, gateway, ledger):
        gateway.disponivel = False

        with pytest.raises(ScreeningUnavailableError):
            _ingressar(registry)

        assert "REP-0001" not in registry
        assert ledger.chamadas == []

    def test_falha_inesperada_da_triagem_vira_indisponivel(self, ledger, store):
        gateway = Mock()
        gateway.consultar.side_effect = RuntimeError("timeout")
        registry = TicketRegistry(gateway, ledger, store)

        with pytest.raises(ScreeningUnavailableError):
            _ingressar(registry)

        assert len(registry) == 0

    def test_id_duplicado(self, registry, gateway):
        _ingressar(registry)

        with pytest.raises(ValidationError) as exc_info:
            _ingressar(registry)

        assert exc_info.value.field == "ticket_id"
        assert len(gateway.consultas) == 1

    def test_ledger_falha_apos_criacao(self, registry, ledger, store):
        ledger.falhar = True

        with pytest.raises(LedgerSyncFailedError):
            _ingressar(registry)

        # Estado local mantido, sem rollback
        assert "REP-0001" in registry
        assert store.gravacoes == 1

    def test_receber_a_partir_do_dto(self, registry):
        ticket = registry.receber(IngressoInputDTO(
            ticket_id="REP-0009",
            numero_serie="SN-9",
            imei="IMEI-9",
            marca="Apple",
            modelo="iPhone 13",
            cliente_id="C9",
            cliente_nome="Bruno Lima",
            filial="Filial Norte",
        ))

        assert ticket.dispositivo.rotulo == "Apple iPhone 13"
        assert ticket.cliente.nome == "Bruno Lima"

    def test_mesmo_cliente_compartilhado(self, registry):
        t1 = _ingressar(registry, "REP-1")
        t2 = _ingressar(registry, "REP-2")

        assert t1.cliente is t2.cliente

    def test_filial_invalida_nao_registra_cliente(self, registry, clientes):
        with pytest.raises(ValidationError):
            registry.registrar_ingresso(
                "REP-0001",
                Device("SERIE-OK-123", "IMEI-OK-456", "Samsung", "S22"),
                ClientEntity.criar("C1", "Ana Torres"),
                "",
            )

        assert clientes.obter("C1") is None
        assert len(registry) == 0



class TestConsulta:

    def test_obter_inexistente(self, registry):
        with pytest.raises(EntityNotFoundError) as exc_info:
            registry.obter("REP-404")
        assert exc_info.value.entity_id == "REP-404"

    def test_listar_em_ordem_de_inclusao(self, registry):
        for ticket_id in ("REP-3", "REP-1", "REP-2"):
            _ingressar(registry, ticket_id)

        assert [t.id for t in registry.listar()] == ["REP-3", "REP-1", "REP-2"]
        assert [i.rotulo for i in registry.listar_itens()] == [
            "REP-3 | Samsung S22",
            "REP-1 | Samsung S22",
            "REP-2 | Samsung S22",
        ]

    def test_registro_vazio(self, registry):
        assert registry.listar() == []
        assert registry.listar_resumos() == []

    def test_listar_tecnicos(self, registry):
        assert [t.id for t in registry.listar_tecnicos()] == ["T1", "T2", "T3"]


class TestDiagnostico:

    def test_salvar_diagnostico_sincroniza_diagnostico_e_estado(self, registry, ledger):
        _ingressar(registry)

        registry.salvar_diagnostico("REP-0001", Diagnosis("Tela quebrada", 500))

        assert ledger.operacoes() == ["criacao", "diagnostico", "estado"]
        _, payload = ledger.chamadas[-1]
        assert payload["estado"] == "Aguardando Autorização e Sinal"
        assert payload["nota"] == "Diagnóstico inicial registrado"

    def test_ledger_falha_mantem_diagnostico(self, registry, ledger, store):
        _ingressar(registry)
        ledger.falhar = True

        with pytest.raises(LedgerSyncFailedError):
            registry.salvar_diagnostico("REP-0001", Diagnosis("Tela quebrada", 500))

        ticket = registry.obter("REP-0001")
        assert ticket.status == RepairStatus.AGUARDANDO_AUTORIZACAO_E_SINAL
        assert store.carregar_snapshot()[0]["status"] == "AGUARDANDO_AUTORIZACAO_E_SINAL"

    def test_falha_inesperada_do_ledger_e_convertida(self, gateway, store):
        ledger = Mock()
        ledger.registrar_diagnostico.side_effect = ConnectionError("reset")
        registry = TicketRegistry(gateway, ledger, store)
        _ingressar(registry)

        with pytest.raises(LedgerSyncFailedError):
            registry.salvar_diagnostico("REP-0001", Diagnosis("Tela quebrada", 500))

        ledger.registrar_mudanca_estado.assert_not_called()


class TestCondicoesETecnico:

    def test_registrar_condicoes_persiste(self, registry, store, ledger):
        _ingressar(registry)
        registry.salvar_diagnostico("REP-0001", Diagnosis("Tela quebrada", 500))
        chamadas = len(ledger.chamadas)

        registry.registrar_condicoes("REP-0001", autorizacao=True, sinal=100)

        record = store.carregar_snapshot()[0]
        assert record["total_sinal"] == 100
        assert record["cliente"]["autorizacao_escrita"] is True
        assert len(ledger.chamadas) == chamadas

    def test_atribuir_tecnico_do_diretorio(self, registry):
        _ingressar(registry)

        ticket = registry.atribuir_tecnico("REP-0001", "T3")

        assert ticket.tecnico.nome == "Jorge Pina"

    def test_atribuir_tecnico_inexistente(self, registry):
        _ingressar(registry)

        with pytest.raises(EntityNotFoundError):
            registry.atribuir_tecnico("REP-0001", "T99")

    def test_atribuir_tecnico_sem_especialidade(self, registry):
        _ingressar(registry)

        with pytest.raises(SkillMismatchError):
            registry.atribuir_tecnico("REP-0001", "T2")

        assert registry.obter("REP-0001").tecnico is None

    def test_adicionar_peca(self, registry, store):
        _ingressar(registry)

        registry.adicionar_peca("REP-0001", Part("R-101", "Pantalla OLED", 180))

        assert store.carregar_snapshot()[0]["pecas"] == [
            {"codigo": "R-101", "nome": "Pantalla OLED", "custo": 180}
        ]


class TestAvancar:

    def test_avancar_usa_nota_padrao(self, registry, ledger):
        _preparar(registry)

        registry.avancar("REP-0001", RepairAction.INICIAR)

        _, payload = ledger.chamadas[-1]
        assert payload == {
            "id": "REP-0001",
            "estado": "Em Reparo",
            "nota": "Mudança de etapa: Em Reparo",
        }

    def test_avancar_com_nota(self, registry, ledger):
        _preparar(registry)

        registry.avancar("REP-0001", "iniciar", nota="Peças separadas")

        assert ledger.chamadas[-1][1]["nota"] == "Peças separadas"

    def test_avancar_rejeitado_nao_sincroniza(self, registry, ledger, store):
        _ingressar(registry)
        registry.salvar_diagnostico("REP-0001", Diagnosis("Tela quebrada", 500))
        registry.registrar_condicoes("REP-0001", autorizacao=True, sinal=249)
        registry.atribuir_tecnico("REP-0001", "T1")
        chamadas = len(ledger.chamadas)
        gravacoes = store.gravacoes

        with pytest.raises(InsufficientDepositError):
            registry.avancar("REP-0001", RepairAction.INICIAR)

        assert len(ledger.chamadas) == chamadas
        assert store.gravacoes == gravacoes

    def test_sincronizar_estado(self, registry, ledger):
        _ingressar(registry)

        registry.sincronizar_estado("REP-0001", "Cliente avisado")

        assert ledger.chamadas[-1] == (
            "estado",
            {"id": "REP-0001", "estado": "Em Revisão Inicial", "nota": "Cliente avisado"},
        )


class TestFluxoCompleto:
    """Cenário de ponta a ponta do reparo REP-0001."""

    def test_fluxo_completo(self, registry, ledger):
        _ingressar(registry)
        registry.salvar_diagnostico("REP-0001", Diagnosis("Tela quebrada e bateria", 500))
        registry.registrar_condicoes("REP-0001", autorizacao=True, sinal=250)
        registry.atribuir_tecnico("REP-0001", "T1")
        registry.adicionar_peca("REP-0001", Part("R-101", "Pantalla OLED", 180))
        registry.adicionar_peca("REP-0001", Part("R-102", "Batería", 65))

        for acao in RepairAction:
            registry.avancar("REP-0001", acao)

        resumo = registry.resumo("REP-0001")
        assert resumo.estado == "Entregue"
        assert resumo.tecnico == "Luis Rojas"
        assert resumo.custo_pecas == 245
        assert len(resumo.historico) >= 7
        assert [h.estado for h in resumo.historico] == [s.value for s in RepairStatus]
        assert ledger.operacoes() == [
            "criacao", "diagnostico", "estado", "estado", "estado", "estado", "estado",
        ]


class TestPersistencia:

    def test_restaurar_reproduz_registro(self, registry, store, gateway, ledger, tecnicos):
        _preparar(registry, "REP-1")
        _ingressar(registry, "REP-2", cliente_id="C2")
        registry.avancar("REP-1", RepairAction.INICIAR)
        mapper = TicketSnapshotMapper()
        antes = mapper.to_record_list(registry.listar())

        novo = TicketRegistry(gateway, ledger, store, tecnicos=tecnicos)
        novo.carregar()

        assert mapper.to_record_list(novo.listar()) == antes
        assert [r.to_dict() for r in novo.listar_resumos()] == [
            r.to_dict() for r in registry.listar_resumos()
        ]

    def test_restaurar_nao_refaz_triagem(self, registry, store, ledger):
        _ingressar(registry)
        gateway = Mock()

        novo = TicketRegistry(gateway, ledger, store)
        novo.carregar()

        gateway.consultar.assert_not_called()
        assert "REP-0001" in novo

    def test_restaurar_compartilha_cliente(self, registry, store, gateway, ledger):
        _ingressar(registry, "REP-1")
        _ingressar(registry, "REP-2")

        novo = TicketRegistry(gateway, ledger, store)
        t1, t2 = novo.carregar()

        assert t1.cliente is t2.cliente

    def test_restaurar_substitui_cliente_conhecido(self, registry, store, gateway, ledger, clientes):
        _ingressar(registry, "REP-1")
        records = store.carregar_snapshot()
        registry.registrar_condicoes("REP-1", autorizacao=True)

        novo = TicketRegistry(gateway, ledger, store, clientes=clientes)
        ticket, = novo.restaurar(records)

        assert ticket.cliente.autorizacao_escrita is False
        assert clientes.obter("C1") is ticket.cliente

    def test_restaurar_apos_limpar_preserva_registros(self, registry, store):
        _ingressar(registry, "REP-1")
        records = store.carregar_snapshot()
        registry.registrar_condicoes("REP-1", autorizacao=True)

        registry.limpar()
        ticket, = registry.restaurar(records)

        assert ticket.cliente.autorizacao_escrita is False

    def test_restaurar_religa_tickets_ja_carregados(self, registry, store):
        _ingressar(registry, "REP-1")
        _ingressar(registry, "REP-2")
        records = [r for r in store.carregar_snapshot() if r["id"] == "REP-2"]

        restaurado, = registry.restaurar(records)

        assert registry.obter("REP-1").cliente is restaurado.cliente


    def test_armazenamento_vazio(self, gateway, ledger):
        registry = TicketRegistry(gateway, ledger, InMemoryDurableStore())
        assert registry.carregar() == []

    def test_falha_ao_gravar(self, gateway, ledger):
        store = Mock()
        store.salvar_snapshot.side_effect = OSError("disco cheio")
        registry = TicketRegistry(gateway, ledger, store)

        with pytest.raises(PersistenceFailedError):
            _ingressar(registry)

        assert "REP-0001" in registry
        assert ledger.chamadas == []

    def test_falha_ao_ler(self, gateway, ledger):
        store = Mock()
        store.carregar_snapshot.side_effect = ValueError("json inválido")
        registry = TicketRegistry(gateway, ledger, store)

        with pytest.raises(PersistenceFailedError):
            registry.carregar()


class TestSessao:

    def test_selecionar_e_recuperar(self, registry, store, gateway, ledger):
        _ingressar(registry, "REP-1")
        _ingressar(registry, "REP-2")

        registry.selecionar("REP-2")

        novo = TicketRegistry(gateway, ledger, store)
        novo.carregar()
        assert novo.ticket_selecionado().id == "REP-2"

    def test_selecionar_inexistente(self, registry, store):
        with pytest.raises(EntityNotFoundError):
            registry.selecionar("REP-404")
        assert store.carregar_id_selecionado() is None

    def test_sem_selecao(self, registry):
        assert registry.ticket_selecionado() is None

    def test_limpar(self, registry, store):
        _ingressar(registry)
        registry.selecionar("REP-0001")

        registry.limpar()

        assert registry.listar() == []
        assert store.carregar_snapshot() == []
        assert registry.ticket_selecionado() is None

    def test_limpar_esquece_autorizacao_dos_clientes(self, registry, clientes):
        _ingressar(registry, "REP-1")
        registry.registrar_condicoes("REP-1", autorizacao=True)

        registry.limpar()

        assert clientes.obter("C1") is None
        ticket = _ingressar(registry, "REP-2")
        registry.salvar_diagnostico("REP-2", Diagnosis("Bateria estufada", 100))
        registry.registrar_condicoes("REP-2", autorizacao=False, sinal=50)
        registry.atribuir_tecnico("REP-2", "T1")

        with pytest.raises(MissingAuthorizationError):
            registry.avancar("REP-2", RepairAction.INICIAR)

        assert ticket.cliente.autorizacao_escrita is False
        assert ticket.status == RepairStatus.AGUARDANDO_AUTORIZACAO_E_SINAL

    def test_falha_ao_limpar(self, gateway, ledger, clientes):
        store = Mock()
        store.limpar.side_effect = OSError("disco indisponível")
        registry = TicketRegistry(gateway, ledger, store, clientes=clientes)
        _ingressar(registry)

        with pytest.raises(PersistenceFailedError):
            registry.limpar()

        assert "REP-0001" in registry
        assert clientes.obter("C1") is not None

    def test_falha_ao_ler_selecao(self, gateway, ledger):
        store = Mock()
        store.carregar_id_selecionado.side_effect = OSError("disco indisponível")
        registry = TicketRegistry(gateway, ledger, store)

        with pytest.raises(PersistenceFailedError):
            registry.ticket_selecionado()

    def test_falha_ao_gravar_selecao(self, gateway, ledger):
        store = Mock()
        store.salvar_id_selecionado.side_effect = OSError("disco indisponível")
        registry = TicketRegistry(gateway, ledger, store)
        _ingressar(registry)

        with pytest.raises(PersistenceFailedError):
            registry.selecionar("REP-0001")

    def test_persistence_failed_do_armazenamento_e_repassada(self, gateway, ledger):
        store = Mock()
        erro = PersistenceFailedError()
        store.limpar.side_effect = erro
        registry = TicketRegistry(gateway, ledger, store)

        with pytest.raises(PersistenceFailedError) as exc_info:
            registry.limpar()

        assert exc_info.value is erro
