"""Persistência Django do registro de reparos."""
