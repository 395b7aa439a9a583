"""initial schema: languages, projects, translations, dialogs

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
import sqlmodel  # noqa: F401


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'languages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code', name='uq_language_code'),
    )
    op.create_index(op.f('ix_languages_code'), 'languages', ['code'], unique=False)

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.TEXT(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_projects_name'), 'projects', ['name'], unique=False)

    op.create_table(
        'project_languages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('language_id', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['language_id'], ['languages.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'language_id', name='uq_project_language'),
    )
    op.create_index(op.f('ix_project_languages_project_id'), 'project_languages', ['project_id'], unique=False)
    op.create_index(op.f('ix_project_languages_language_id'), 'project_languages', ['language_id'], unique=False)

    op.create_table(
        'translation_groups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.TEXT(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_translation_groups_project_id'), 'translation_groups', ['project_id'], unique=False)
    op.create_index(op.f('ix_translation_groups_name'), 'translation_groups', ['name'], unique=False)

    op.create_table(
        'translation_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('comment', sa.TEXT(), nullable=True),
        sa.Column('copied', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['group_id'], ['translation_groups.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_id', 'key', name='uq_translation_entry_key'),
    )
    op.create_index(op.f('ix_translation_entries_group_id'), 'translation_entries', ['group_id'], unique=False)
    op.create_index(op.f('ix_translation_entries_key'), 'translation_entries', ['key'], unique=False)

    op.create_table(
        'translations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_id', sa.Integer(), nullable=False),
        sa.Column('language_id', sa.Integer(), nullable=False),
        sa.Column('text', sa.TEXT(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['entry_id'], ['translation_entries.id']),
        sa.ForeignKeyConstraint(['language_id'], ['languages.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entry_id', 'language_id', name='uq_translation_lang'),
    )
    op.create_index(op.f('ix_translations_entry_id'), 'translations', ['entry_id'], unique=False)
    op.create_index(op.f('ix_translations_language_id'), 'translations', ['language_id'], unique=False)

    op.create_table(
        'dialogs',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.TEXT(), nullable=True),
        sa.Column('start_section', sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_dialogs_project_id'), 'dialogs', ['project_id'], unique=False)

    op.create_table(
        'dialog_sections',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('dialog_id', sa.String(), nullable=False),
        sa.Column('section_id', sa.String(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['dialog_id'], ['dialogs.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('dialog_id', 'section_id', name='uq_dialog_section_id'),
    )
    op.create_index(op.f('ix_dialog_sections_dialog_id'), 'dialog_sections', ['dialog_id'], unique=False)
    op.create_index(op.f('ix_dialog_sections_section_id'), 'dialog_sections', ['section_id'], unique=False)

    op.create_table(
        'dialog_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('section_id', sa.Integer(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('speaker', sa.String(), nullable=True),
        sa.Column('text_key', sa.String(), nullable=True),
        sa.Column('background', sa.String(), nullable=True),
        sa.Column('event_name', sa.String(), nullable=True),
        sa.Column('event_value', sa.String(), nullable=True),
        sa.Column('data', sa.TEXT(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['section_id'], ['dialog_sections.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_dialog_lines_section_id'), 'dialog_lines', ['section_id'], unique=False)
    op.create_index(op.f('ix_dialog_lines_type'), 'dialog_lines', ['type'], unique=False)
    op.create_index(op.f('ix_dialog_lines_text_key'), 'dialog_lines', ['text_key'], unique=False)


def downgrade() -> None:
    for table in (
        'dialog_lines',
        'dialog_sections',
        'dialogs',
        'translations',
        'translation_entries',
        'translation_groups',
        'project_languages',
        'projects',
        'languages',
    ):
        op.drop_table(table)
