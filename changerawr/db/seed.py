"""Database seeding for Changerawr.

Creates an initial administrator and a demo project.
"""

from typing import Optional

from slugify import slugify
from sqlalchemy.orm import Session

from changerawr.core.rbac.roles import Role
from changerawr.core.security import get_password_hash
from changerawr.db.models import Changelog, Project, User


def seed_admin(db: Session, email: str, password: str, *, name: Optional[str] = None) -> User:
    """
    Create an administrator account.

    Idempotent - if a user with the email exists, returns it unchanged.
    """
    email = email.lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        return existing

    user = User(
        email=email,
        password_hash=get_password_hash(password),
        name=name,
        role=Role.ADMIN.value,
    )
    db.add(user)
    db.flush()
    return user


def seed_project(
    db: Session,
    name: str,
    *,
    require_approval: bool = True,
    allow_auto_publish: bool = False,
    default_tags: Optional[list[str]] = None,
) -> Project:
    """
    Create a project with its changelog.

    Idempotent on the slug derived from ``name``.
    """
    slug = slugify(name)
    existing = db.query(Project).filter(Project.slug == slug).first()
    if existing:
        return existing

    project = Project(
        name=name,
        slug=slug,
        require_approval=require_approval,
        allow_auto_publish=allow_auto_publish,
        default_tags=default_tags or [],
    )
    project.changelog = Changelog()
    db.add(project)
    db.flush()
    return project


# CLI script for seeding
if __name__ == "__main__":
    import os
    import sys
    from changerawr.db.session import SessionLocal

    db = SessionLocal()
    try:
        admin = seed_admin(
            db,
            os.environ.get("SEED_ADMIN_EMAIL", "admin@changerawr.local"),
            os.environ.get("SEED_ADMIN_PASSWORD", "changeme123"),
            name="Administrator",
        )
        print(f"Admin user: {admin.email} (ID: {admin.id})")

        project = seed_project(db, "Demo Project", default_tags=["Feature", "Bugfix"])
        print(f"Project: {project.name} (slug: {project.slug})")

        db.commit()
        print("\nSeeding complete!")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()
