from datetime import datetime, timezone

from sqlalchemy import JSON, TIMESTAMP, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class WorkflowModel(Base):
    __tablename__ = "workflows"
    __table_args__ = (
        UniqueConstraint("owner", "repo_name", "branch", "path", name="uq_workflows_retrieved_from"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # retrieved_from
    owner: Mapped[str] = mapped_column(String(100))
    repo_name: Mapped[str] = mapped_column(String(100))
    branch: Mapped[str] = mapped_column(String(255))
    path: Mapped[str] = mapped_column(String(1024))

    retrieved_on: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), default=utc_now)
    last_commit: Mapped[str | None] = mapped_column(String(40), nullable=True)
    label: Mapped[str | None] = mapped_column(Text, nullable=True)
    doc: Mapped[str | None] = mapped_column(Text, nullable=True)
    inputs: Mapped[dict] = mapped_column(JSON, default=dict)
    outputs: Mapped[dict] = mapped_column(JSON, default=dict)
    steps: Mapped[dict] = mapped_column(JSON, default=dict)
    ro_bundle: Mapped[str | None] = mapped_column(String(1024), nullable=True)
