"""
Configuração do projeto RepairShop Manager.

Módulos:
- settings: Configurações Django e das integrações
- container: Dependency Injection Container
"""
