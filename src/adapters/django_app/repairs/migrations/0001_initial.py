"""
Migration inicial para o registro de reparos.

Cria as tabelas:
- repair_ticket_snapshots: Snapshot por ticket
- repair_preferences: Preferências da sessão
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='TicketSnapshotModel',
            fields=[
                ('ticket_id', models.CharField(
                    max_length=100,
                    primary_key=True,
                    serialize=False,
                    help_text='ID único do ticket de reparo'
                )),
                ('posicao', models.PositiveIntegerField(
                    db_index=True,
                    help_text='Ordem de inclusão no registro'
                )),
                ('payload', models.JSONField(
                    help_text='Registro completo do ticket'
                )),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Snapshot de Reparo',
                'verbose_name_plural': 'Snapshots de Reparos',
                'db_table': 'repair_ticket_snapshots',
                'ordering': ['posicao'],
            },
        ),
        migrations.CreateModel(
            name='PreferenceModel',
            fields=[
                ('chave', models.CharField(
                    max_length=100,
                    primary_key=True,
                    serialize=False
                )),
                ('valor', models.CharField(
                    max_length=255,
                    blank=True,
                    default=''
                )),
            ],
            options={
                'verbose_name': 'Preferência',
                'verbose_name_plural': 'Preferências',
                'db_table': 'repair_preferences',
            },
        ),
    ]
