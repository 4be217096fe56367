from dataclasses import dataclass, field


@dataclass(frozen=True)
class CWLElement:
    """An input or output of a CWL workflow."""

    label: str | None = None
    doc: str | None = None
    type: str | None = None
    default: str | None = None

    def to_dict(self) -> dict:
        return {"label": self.label, "doc": self.doc, "type": self.type, "default": self.default}

    @classmethod
    def from_dict(cls, data: dict) -> "CWLElement":
        return cls(
            label=data.get("label"),
            doc=data.get("doc"),
            type=data.get("type"),
            default=data.get("default"),
        )


@dataclass(frozen=True)
class CWLStep:
    """
    A step of a CWL workflow.

    Attributes:
        run (str | None): The tool or sub-workflow the step runs, when given by reference.
        sources (tuple[str, ...]): Workflow inputs or other step outputs feeding this step.
    """

    label: str | None = None
    doc: str | None = None
    run: str | None = None
    sources: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "doc": self.doc,
            "run": self.run,
            "sources": list(self.sources),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CWLStep":
        return cls(
            label=data.get("label"),
            doc=data.get("doc"),
            run=data.get("run"),
            sources=tuple(data.get("sources") or ()),
        )
