"""Project publication policy."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PublicationPolicy:
    """Immutable snapshot of a project's publication flags."""

    require_approval: bool = True
    allow_auto_publish: bool = False

    @classmethod
    def from_project(cls, project) -> "PublicationPolicy":
        return cls(
            require_approval=bool(project.require_approval),
            allow_auto_publish=bool(project.allow_auto_publish),
        )
