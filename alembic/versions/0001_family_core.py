"""create family, chore, allowance, reward and chat tables

Revision ID: 0001_family_core
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_family_core"
down_revision = None
branch_labels = None
depends_on = None


def _created_at(name: str = "CreatedAt") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.current_timestamp(),
    )


def upgrade() -> None:
    op.create_table(
        "families",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("FamilyCode", sa.String(length=12), nullable=False),
        sa.Column("PinHash", sa.String(length=255), nullable=False),
        sa.Column("Name", sa.String(length=120), nullable=False),
        _created_at(),
    )
    op.create_index("ix_families_family_code", "families", ["FamilyCode"], unique=True)

    op.create_table(
        "users",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("FamilyId", sa.Integer(), sa.ForeignKey("families.Id"), nullable=False),
        sa.Column("Name", sa.String(length=120), nullable=False),
        sa.Column("Role", sa.String(length=20), nullable=False),
        sa.Column("Avatar", sa.String(length=40)),
        sa.Column("Points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("Streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("JarSpend", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("JarSave", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("JarGive", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        _created_at(),
    )
    op.create_index("ix_users_family_id", "users", ["FamilyId"])

    op.create_table(
        "chores",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("FamilyId", sa.Integer(), sa.ForeignKey("families.Id"), nullable=False),
        sa.Column("Title", sa.String(length=200), nullable=False),
        sa.Column("Description", sa.Text()),
        sa.Column("Points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("Schedule", sa.Text()),
        sa.Column("Difficulty", sa.String(length=20), nullable=False, server_default="easy"),
        sa.Column("Photos", sa.Text()),
        sa.Column("IsActive", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
    )
    op.create_index("ix_chores_family_id", "chores", ["FamilyId"])

    op.create_table(
        "chore_assignments",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("ChoreId", sa.Integer(), sa.ForeignKey("chores.Id"), nullable=False),
        sa.Column("UserId", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("Status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("DueDate", sa.Date()),
        _created_at(),
    )
    op.create_index("ix_chore_assignments_chore_id", "chore_assignments", ["ChoreId"])
    op.create_index("ix_chore_assignments_user_id", "chore_assignments", ["UserId"])

    op.create_table(
        "chore_completions",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column(
            "AssignmentId",
            sa.Integer(),
            sa.ForeignKey("chore_assignments.Id"),
            nullable=False,
        ),
        sa.Column("UserId", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("Status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("BeforePhotos", sa.Text()),
        sa.Column("AfterPhotos", sa.Text()),
        sa.Column("Notes", sa.Text()),
        sa.Column("TimeSpent", sa.Integer()),
        _created_at("SubmittedAt"),
        sa.Column("ApprovedAt", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_chore_completions_assignment_id", "chore_completions", ["AssignmentId"])
    op.create_index("ix_chore_completions_user_id", "chore_completions", ["UserId"])

    op.create_table(
        "allowance_transactions",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("UserId", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("Type", sa.String(length=20), nullable=False, server_default="deposit"),
        sa.Column("Amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("JarDistribution", sa.Text(), nullable=False),
        sa.Column("Source", sa.String(length=60)),
        sa.Column("Notes", sa.Text()),
        sa.Column("CreatedByUserId", sa.Integer()),
        _created_at(),
    )
    op.create_index("ix_allowance_transactions_user_id", "allowance_transactions", ["UserId"])
    op.create_index("ix_allowance_transactions_created_at", "allowance_transactions", ["CreatedAt"])

    op.create_table(
        "rewards",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("FamilyId", sa.Integer(), sa.ForeignKey("families.Id"), nullable=False),
        sa.Column("Title", sa.String(length=200), nullable=False),
        sa.Column("Description", sa.Text()),
        sa.Column("PointCost", sa.Integer(), nullable=False),
        sa.Column("Photos", sa.Text()),
        sa.Column("Stock", sa.Integer()),
        sa.Column("IsActive", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.CheckConstraint("Stock IS NULL OR Stock >= 0", name="ck_rewards_stock_non_negative"),
    )
    op.create_index("ix_rewards_family_id", "rewards", ["FamilyId"])

    op.create_table(
        "reward_redemptions",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("RewardId", sa.Integer(), sa.ForeignKey("rewards.Id"), nullable=False),
        sa.Column("UserId", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("Status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("PointCost", sa.Integer(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_reward_redemptions_reward_id", "reward_redemptions", ["RewardId"])
    op.create_index("ix_reward_redemptions_user_id", "reward_redemptions", ["UserId"])

    op.create_table(
        "chat_messages",
        sa.Column("Id", sa.Integer(), primary_key=True),
        sa.Column("FamilyId", sa.Integer(), sa.ForeignKey("families.Id"), nullable=False),
        sa.Column("UserId", sa.Integer(), sa.ForeignKey("users.Id"), nullable=False),
        sa.Column("Content", sa.Text(), nullable=False),
        sa.Column("Type", sa.String(length=20), nullable=False, server_default="text"),
        sa.Column("Attachments", sa.Text()),
        _created_at(),
    )
    op.create_index("ix_chat_messages_family_id", "chat_messages", ["FamilyId"])
    op.create_index("ix_chat_messages_created_at", "chat_messages", ["CreatedAt"])


def downgrade() -> None:
    op.drop_table("chat_messages")
    op.drop_table("reward_redemptions")
    op.drop_table("rewards")
    op.drop_table("allowance_transactions")
    op.drop_table("chore_completions")
    op.drop_table("chore_assignments")
    op.drop_table("chores")
    op.drop_table("users")
    op.drop_table("families")
