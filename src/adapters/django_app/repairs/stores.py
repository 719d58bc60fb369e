"""
Armazenamento durável Django para o registro de reparos.

Implementa o port DurableStore definido no Core.
É um DRIVEN ADAPTER - acionado pelo TicketRegistry a cada mutação.

Princípios:
- Store não contém lógica de negócio
- Recebe e devolve registros planos (TicketSnapshotMapper)
- Cada gravação substitui o snapshot inteiro, de forma atômica
"""

from typing import List, Optional
import logging

from django.db import DatabaseError, transaction

from src.core.repairs.exceptions import PersistenceFailedError
from src.core.repairs.mappers import TicketRecord

from .models import PreferenceModel, TicketSnapshotModel

logger = logging.getLogger(__name__)


class DjangoDurableStore:
    """
    Implementação Django do DurableStore.

    Example:
        store = DjangoDurableStore()
        store.salvar_snapshot(mapper.to_record_list(tickets))
        records = store.carregar_snapshot()
    """

    def salvar_snapshot(self, records: List[TicketRecord]) -> None:
        """
        Substitui o snapshot gravado pelos registros informados.

        Raises:
            PersistenceFailedError: Se o banco recusar a gravação
        """
        logger.debug(f"Saving snapshot with {len(records)} tickets")
        try:
            with transaction.atomic():
                TicketSnapshotModel.objects.all().delete()
                TicketSnapshotModel.objects.bulk_create([
                    TicketSnapshotModel(
                        ticket_id=record["id"],
                        posicao=posicao,
                        payload=record,
                    )
                    for posicao, record in enumerate(records)
                ])
        except DatabaseError as exc:
            logger.error(f"Error saving snapshot: {exc}")
            raise PersistenceFailedError() from exc

    def carregar_snapshot(self) -> List[TicketRecord]:
        try:
            return [
                model.payload
                for model in TicketSnapshotModel.objects.order_by('posicao')
            ]
        except DatabaseError as exc:
            logger.error(f"Error loading snapshot: {exc}")
            raise PersistenceFailedError("Não foi possível ler os dados salvos") from exc

    def salvar_id_selecionado(self, ticket_id: str) -> None:
        try:
            PreferenceModel.objects.update_or_create(
                chave=PreferenceModel.CHAVE_TICKET_SELECIONADO,
                defaults={'valor': ticket_id}
            )
        except DatabaseError as exc:
            logger.error(f"Error saving selected ticket: {exc}")
            raise PersistenceFailedError() from exc

    def carregar_id_selecionado(self) -> Optional[str]:
        try:
            preferencia = PreferenceModel.objects.filter(
                chave=PreferenceModel.CHAVE_TICKET_SELECIONADO
            ).first()
        except DatabaseError as exc:
            logger.error(f"Error loading selected ticket: {exc}")
            raise PersistenceFailedError("Não foi possível ler os dados salvos") from exc
        if preferencia is None or not preferencia.valor:
            return None
        return preferencia.valor

    def limpar(self) -> None:
        """Remove snapshot e preferências."""
        try:
            with transaction.atomic():
                TicketSnapshotModel.objects.all().delete()
                PreferenceModel.objects.all().delete()
        except DatabaseError as exc:
            logger.error(f"Error clearing durable store: {exc}")
            raise PersistenceFailedError() from exc
        logger.info("Durable store cleared")
