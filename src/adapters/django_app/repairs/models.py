"""
Django Models para o registro de reparos.

Estes models são ADAPTERS - guardam o snapshot produzido pelo
TicketSnapshotMapper do Core.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- O payload é o registro plano do ticket, sem interpretação

Tabelas:
- TicketSnapshotModel: Uma linha por ticket (payload JSON + posição)
- PreferenceModel: Chave/valor (ticket selecionado)
"""

from django.db import models


class TicketSnapshotModel(models.Model):
    """
    Snapshot de um ticket de reparo.

    Fields:
        ticket_id: ID opaco do ticket
        posicao: Ordem de inclusão no registro
        payload: Registro completo (JSONField)
        atualizado_em: Momento da última gravação
    """

    ticket_id = models.CharField(
        max_length=100,
        primary_key=True,
        help_text="ID único do ticket de reparo"
    )

    posicao = models.PositiveIntegerField(
        db_index=True,
        help_text="Ordem de inclusão no registro"
    )

    payload = models.JSONField(
        help_text="Registro completo do ticket"
    )

    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'repair_ticket_snapshots'
        verbose_name = 'Snapshot de Reparo'
        verbose_name_plural = 'Snapshots de Reparos'
        ordering = ['posicao']

    def __str__(self):
        return f"{self.ticket_id} (#{self.posicao})"


class PreferenceModel(models.Model):
    """Preferências da sessão (ex.: ticket selecionado)."""

    CHAVE_TICKET_SELECIONADO = 'ticket_selecionado'

    chave = models.CharField(max_length=100, primary_key=True)
    valor = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        db_table = 'repair_preferences'
        verbose_name = 'Preferência'
        verbose_name_plural = 'Preferências'

    def __str__(self):
        return f"{self.chave}={self.valor}"
