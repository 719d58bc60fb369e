#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings (opcional, para o armazenamento no banco)
2. Executa migrations
3. Executa o fluxo completo de um reparo de demonstração (opcional)

Uso:
    python scripts/quick_setup.py --demo
    python scripts/quick_setup.py --with-django --demo
    python scripts/quick_setup.py --with-django --check-only
"""

import os
import sys
import argparse

# Adicionar raiz do projeto ao path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    import django
    django.setup()


def run_migrations():
    """Executa migrations."""
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def check_connection():
    """Verifica conexão com o banco."""
    from django.db import DatabaseError, connection

    print("🔍 Verificando conexão com o banco...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("✅ Conexão OK!")
        return True
    except DatabaseError as e:
        print(f"❌ Erro de conexão: {e}")
        return False


def run_demo(store_mode: str):
    """Executa o fluxo completo do reparo REP-0001."""
    from src.config.container import get_container
    from src.core.repairs import Diagnosis, IngressoInputDTO, Part, RepairAction
    from src.core.shared.exceptions import DomainException

    container = get_container()
    container.config.durable_store_mode.from_value(store_mode)
    registry = container.ticket_registry()

    restaurados = registry.carregar()
    if restaurados:
        print(f"♻️  {len(restaurados)} reparos restaurados, limpando para a demonstração...")
        registry.limpar()

    print("📝 Registrando reparo de demonstração...")

    try:
        ticket = registry.receber(IngressoInputDTO(
            ticket_id='REP-0001',
            numero_serie='SERIE-OK-123',
            imei='IMEI-OK-456',
            marca='Samsung',
            modelo='S22',
            cliente_id='C1',
            cliente_nome='Ana Torres',
            filial='Filial Centro',
        ))
        registry.selecionar(ticket.id)
        registry.salvar_diagnostico(ticket.id, Diagnosis('Tela quebrada e bateria degradada', 500))
        registry.registrar_condicoes(ticket.id, autorizacao=True, sinal=250)
        registry.atribuir_tecnico(ticket.id, 'T1')
        registry.adicionar_peca(ticket.id, Part('R-101', 'Pantalla OLED', 180))
        registry.adicionar_peca(ticket.id, Part('R-102', 'Batería', 65))

        for acao in RepairAction:
            registry.avancar(ticket.id, acao)
            print(f"   ✓ {registry.obter(ticket.id).status.value}")
    except DomainException as e:
        print(f"❌ {e.code}: {e.message}")
        return

    resumo = registry.resumo(ticket.id)

    print("\n" + "=" * 60)
    print(f"📊 Reparo {resumo.id}")
    print("=" * 60)
    print(f"  Cliente: {resumo.cliente}")
    print(f"  Equipamento: {resumo.equipamento}")
    print(f"  Técnico: {resumo.tecnico}")
    print(f"  Estado: {resumo.estado}")
    print(f"  Custo estimado: R$ {resumo.custo_estimado:.2f}")
    print(f"  Sinal: R$ {resumo.total_sinal:.2f}")
    print(f"  Peças: R$ {resumo.custo_pecas:.2f}")
    print("  Histórico:")
    for item in resumo.historico:
        print(f"    - {item.estado}: {item.nota}")
    print("=" * 60 + "\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-django',
        action='store_true',
        help='Usar o banco (Django ORM) como armazenamento durável'
    )
    parser.add_argument(
        '--demo',
        action='store_true',
        help='Executar o fluxo de demonstração'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 RepairShop Manager - Quick Setup")
    print("=" * 60 + "\n")

    store_mode = 'memory'

    if args.with_django:
        setup_django()

        if args.check_only:
            check_connection()
            return

        if not check_connection():
            print("\n⚠️  Certifique-se de que o banco de dados está rodando.")
            print("   Sem DATABASE_URL/DATABASE_HOST o SQLite local é usado.")
            return

        run_migrations()
        store_mode = 'django'

    if args.demo:
        run_demo(store_mode)


if __name__ == '__main__':
    main()
