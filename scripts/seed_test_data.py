"""
Seed the configured database with an admin account, sample employees and a
sample project with subtasks.

Usage:
  DATABASE_URL=sqlite:///./var/fcm.db python scripts/seed_test_data.py

This script is idempotent: users are upserted by username and the sample
project by name, so running it twice leaves the same rows behind.
"""

import sys

from fcm_hub.config import settings
from fcm_hub.db import SessionLocal, Base, engine
from fcm_hub.models.models import User, Project, ProjectTask, utcnow


def ensure_user(session, username: str, password: str, **fields) -> User:
    user = session.query(User).filter(User.username == username).first()
    if user:
        # Keep the existing password; only refresh descriptive fields
        for k, v in fields.items():
            setattr(user, k, v)
        user.updated_at = utcnow()
        session.flush()
        return user
    user = User(username=username, password=password, password_hash=password, **fields)
    session.add(user)
    session.flush()
    return user


def ensure_project(session, project_name: str, task_names: list[str], **fields) -> Project:
    project = session.query(Project).filter(Project.project_name == project_name).first()
    if project is None:
        project = Project(project_name=project_name, **fields)
        session.add(project)
        session.flush()
    existing = {t.name for t in project.task_items}
    next_index = len(project.task_items)
    for name in task_names:
        if name in existing:
            continue
        session.add(ProjectTask(project_id=project.id, name=name, order_index=next_index))
        next_index += 1
    session.flush()
    return project


def main() -> None:
    if engine is None:
        print("DATABASE_URL is not set; nothing to seed.")
        sys.exit(1)

    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        ensure_user(
            session,
            settings.fallback_admin_username,
            settings.fallback_admin_password,
            full_name="Administrator",
            position="System Administrator",
        )
        ensure_user(session, "maria.reyes", "Welcome123", full_name="Maria Reyes", position="Project Engineer", contact_number="09171234567")
        ensure_user(session, "jose.santos", "Welcome123", full_name="Jose Santos", position="Foreman", contact_number="09181234567")

        ensure_project(
            session,
            "Warehouse Roofing",
            ["Site survey", "Material canvass", "Roof sheet installation", "Turnover"],
            client_name="ACME Corp",
            building_address="Pasig City",
            work_type="Roofing",
            project_cost="Php 450,000",
            last_edited_by="Administrator",
        )

        session.commit()
        print("Seed data created/updated.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
