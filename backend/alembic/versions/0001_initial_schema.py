"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for Tocafy:
profiles, shows, songs, song_requests, moderation_configs, show_activity.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

profile_role = sa.Enum("artist", "audience", name="profilerole")
show_status = sa.Enum("draft", "live", "paused", "ended", name="showstatus")
request_status = sa.Enum("pending", "accepted", "playing", "played", "skipped", name="requeststatus")
activity_entity = sa.Enum("show", "song_request", name="activityentity")


def upgrade() -> None:
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("profile_id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("role", profile_role, nullable=False, server_default="audience"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- shows ---
    op.create_table(
        "shows",
        sa.Column("show_id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("profiles.profile_id"), nullable=False, index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("status", show_status, nullable=False, server_default="draft"),
        sa.Column("public_code", sa.String(120), nullable=True, unique=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- songs ---
    op.create_table(
        "songs",
        sa.Column("song_id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("profiles.profile_id"), nullable=False, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("artist", sa.String(255), nullable=False),
        sa.Column("key", sa.String(10), nullable=True),
        sa.Column("genre", sa.String(100), nullable=True),
        sa.Column("lyrics", sa.Text, nullable=True),
        sa.Column("chords", sa.Text, nullable=True),
        sa.Column("duration_seconds", sa.Integer, nullable=True),
        sa.Column("cover_url", sa.String(500), nullable=True),
        sa.Column("external_id", sa.String(100), nullable=True),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- song_requests ---
    op.create_table(
        "song_requests",
        sa.Column("request_id", sa.String(36), primary_key=True),
        sa.Column("show_id", sa.String(36), sa.ForeignKey("shows.show_id"), nullable=False, index=True),
        sa.Column("song_id", sa.String(36), sa.ForeignKey("songs.song_id"), nullable=True),
        sa.Column("custom_title", sa.String(255), nullable=True),
        sa.Column("custom_artist", sa.String(255), nullable=True),
        sa.Column("requester_name", sa.String(100), nullable=False),
        sa.Column("requester_id", sa.String(36), sa.ForeignKey("profiles.profile_id"), nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("tip_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("status", request_status, nullable=False, server_default="pending"),
        sa.Column("position", sa.Integer, nullable=True),
        sa.Column("flagged", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("flag_reason", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("played_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- moderation_configs ---
    op.create_table(
        "moderation_configs",
        sa.Column("config_id", sa.String(36), primary_key=True),
        sa.Column("artist_id", sa.String(36), sa.ForeignKey("profiles.profile_id"), nullable=False),
        sa.Column("show_id", sa.String(36), sa.ForeignKey("shows.show_id"), nullable=True),
        sa.Column("blocked_words", sa.JSON, nullable=False),
        sa.Column("profanity_filter", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("spam_prevention", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("request_limit", sa.Integer, nullable=False, server_default="3"),
        sa.Column("time_window_minutes", sa.Integer, nullable=False, server_default="15"),
        sa.Column("require_moderation", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("auto_reject", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("artist_id", "show_id", name="uq_moderation_scope"),
    )

    # --- show_activity ---
    op.create_table(
        "show_activity",
        sa.Column("activity_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("show_id", sa.String(36), sa.ForeignKey("shows.show_id"), nullable=False, index=True),
        sa.Column("entity", activity_entity, nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("new_state", sa.String(20), nullable=False),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("show_activity")
    op.drop_table("moderation_configs")
    op.drop_table("song_requests")
    op.drop_table("songs")
    op.drop_table("shows")
    op.drop_table("profiles")
    bind = op.get_bind()
    for enum_type in (activity_entity, request_status, show_status, profile_role):
        enum_type.drop(bind, checkfirst=True)
