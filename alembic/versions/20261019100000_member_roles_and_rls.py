"""Add is_admin, request roles and row-level security on members.

Requests run as one of three roles: anonymous (no token), member, admin.
Claims from the verified token are visible as jwt.claims.member_id and
jwt.claims.role. Only the connecting (authenticator) role may INSERT, which is
what the registration flow runs as.

Revision ID: 20261019100000
Revises: 20261019000000
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261019100000"
down_revision: Union[str, None] = "20261019000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REQUEST_ROLES = ("anonymous", "member", "admin")

_CLAIM_ROLE = "current_setting('jwt.claims.role', true)"
_CLAIM_MEMBER_ID = "nullif(current_setting('jwt.claims.member_id', true), '')::int"
_OWN_ROW = f"{_CLAIM_ROLE} = 'member' AND id = {_CLAIM_MEMBER_ID}"
_ADMIN = f"{_CLAIM_ROLE} = 'admin'"


def upgrade() -> None:
    op.add_column(
        "members",
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    for role in REQUEST_ROLES:
        op.execute(
            f"""
            DO $$
            BEGIN
              IF NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = '{role}') THEN
                CREATE ROLE {role} NOLOGIN;
              END IF;
            END
            $$;
            """
        )
    roles = ", ".join(REQUEST_ROLES)
    op.execute(f"GRANT {roles} TO CURRENT_USER")
    op.execute(f"GRANT USAGE ON SCHEMA public TO {roles}")

    op.execute("REVOKE INSERT, DELETE ON public.members FROM PUBLIC")
    op.execute(f"REVOKE ALL ON public.members FROM {roles}")
    op.execute("GRANT SELECT, UPDATE (first_name, last_name, email) ON public.members TO member")
    op.execute("GRANT SELECT, UPDATE ON public.members TO admin")

    op.execute("ALTER TABLE public.members ENABLE ROW LEVEL SECURITY")
    op.execute(
        f"CREATE POLICY member_select_own ON public.members FOR SELECT TO member USING ({_OWN_ROW})"
    )
    op.execute(
        "CREATE POLICY member_update_own ON public.members FOR UPDATE TO member "
        f"USING ({_OWN_ROW}) WITH CHECK ({_OWN_ROW})"
    )
    op.execute(
        f"CREATE POLICY admin_select_all ON public.members FOR SELECT TO admin USING ({_ADMIN})"
    )
    op.execute(
        "CREATE POLICY admin_update_all ON public.members FOR UPDATE TO admin "
        f"USING ({_ADMIN}) WITH CHECK ({_ADMIN})"
    )


def downgrade() -> None:
    for policy in ("admin_update_all", "admin_select_all", "member_update_own", "member_select_own"):
        op.execute(f"DROP POLICY IF EXISTS {policy} ON public.members")
    op.execute("ALTER TABLE public.members DISABLE ROW LEVEL SECURITY")
    # Roles are cluster-wide and may be shared; only their grants on this table are removed.
    op.execute(f"REVOKE ALL ON public.members FROM {', '.join(REQUEST_ROLES)}")
    op.drop_column("members", "is_admin")
