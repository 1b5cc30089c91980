"""CLI utilities for preparing a SafeSite database with demo data."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import typer
from sqlalchemy.orm import Session

from ..database import Base, SessionLocal, engine
from ..services import compliance_logs, hazard_zones, protocols, users

# purpose: seed a local database with demo users, zones, protocols and logs
# status: active
# depends_on: services/
# related_docs: DESIGN.md


app = typer.Typer(help="SafeSite database seeding commands")

DEMO_PASSWORD = "SafetyFirst123!"

_DEMO_USERS = [
    {"email": "officer@safesite.com", "username": "safety_officer", "first_name": "Sarah", "last_name": "Martinez"},
    {"email": "tech1@safesite.com", "username": "tech_james", "first_name": "James", "last_name": "Wilson"},
    {"email": "tech2@safesite.com", "username": "tech_maria", "first_name": "Maria", "last_name": "Garcia"},
]

# red: high risk, yellow: medium, green: low
_DEMO_ZONES = {
    "High Voltage Area": "#dc2626",
    "Chemical Storage": "#eab308",
    "General Workspace": "#16a34a",
    "Confined Spaces": "#dc2626",
}

_DEMO_PROTOCOLS = [
    {
        "owner": "safety_officer",
        "name": "Morning PPE Inspection",
        "description": "Verify all personal protective equipment is in good condition and properly fitted",
        "frequency": "DAILY",
        "target_count": 1,
        "zones": ["General Workspace"],
        "logs": [(1, "All crew PPE inspected, one pair of gloves replaced"), (2, None)],
    },
    {
        "owner": "safety_officer",
        "name": "Lockout/Tagout Verification",
        "description": "Ensure equipment is properly isolated and tagged before maintenance",
        "frequency": "DAILY",
        "target_count": 2,
        "zones": ["High Voltage Area"],
        "logs": [(1, "Panel B isolated and tagged")],
    },
    {
        "owner": "tech_james",
        "name": "Voltage Detector Test",
        "description": "Live-dead-live test of voltage detectors before switching work",
        "frequency": "SHIFT_START",
        "target_count": 1,
        "zones": ["High Voltage Area", "Confined Spaces"],
        "logs": [(0, "Detector passed")],
    },
    {
        "owner": "tech_maria",
        "name": "Chemical Storage Audit",
        "description": "Check labelling, segregation and spill kits in chemical storage",
        "frequency": "WEEKLY",
        "target_count": 1,
        "zones": ["Chemical Storage"],
        "logs": [(7, "Spill kit restocked")],
    },
]


def seed_demo(db: Session) -> dict[str, int]:
    """Create demo users, zones, protocols and past logs through the service layer."""

    owners = {}
    for entry in _DEMO_USERS:
        user = users.register_user(db, password=DEMO_PASSWORD, **entry)
        owners[user.username] = user.id

    zone_ids = {}
    for name, color in _DEMO_ZONES.items():
        zone_ids[name] = hazard_zones.create_zone(db, name=name, color=color).id

    now = datetime.now(timezone.utc)
    log_count = 0
    for entry in _DEMO_PROTOCOLS:
        owner_id = owners[entry["owner"]]
        view = protocols.create_protocol(
            db,
            owner_id,
            name=entry["name"],
            description=entry["description"],
            frequency=entry["frequency"],
            target_count=entry["target_count"],
            zone_ids=[zone_ids[name] for name in entry["zones"]],
        )
        for days_ago, note in entry["logs"]:
            compliance_logs.create_log(
                db,
                view.protocol.id,
                owner_id,
                completion_date=now - timedelta(days=days_ago, minutes=5),
                note=note,
            )
            log_count += 1
    db.commit()
    return {
        "users": len(owners),
        "zones": len(zone_ids),
        "protocols": len(_DEMO_PROTOCOLS),
        "logs": log_count,
    }


@app.command()
def reset() -> None:
    """Drop and recreate every SafeSite table."""

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    typer.echo("Schema recreated")


@app.command()
def demo(
    fresh: bool = typer.Option(True, help="Recreate the schema before seeding"),
) -> None:
    """Populate the database with demo users, zones, protocols and logs."""

    if fresh:
        reset()
    else:
        Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        counts = seed_demo(session)
    typer.echo(
        "Seeded {users} users, {zones} hazard zones, {protocols} protocols, {logs} compliance logs".format(**counts)
    )
    typer.echo(f"Demo password for all users: {DEMO_PASSWORD}")


if __name__ == "__main__":
    app()
