from __future__ import annotations

import argparse
import asyncio
import random
import uuid
from datetime import timedelta

from warranty_tracker.core.database import AsyncSessionLocal, dispose_db, init_db
from warranty_tracker.core.logging import setup_logging
from warranty_tracker.models import (
    AgentLog,
    ManagerAction,
    Product,
    Purchase,
    ServiceAppointment,
    Ticket,
    User,
)
from warranty_tracker.schemas.ticket import TicketStatus
from warranty_tracker.utils.time import utc_now

PRODUCTS = [
    ("Galaxy S23", "Samsung", "SM-S911B", 24),
    ("ThinkPad X1 Carbon", "Lenovo", "Gen 11", 36),
    ("WH-1000XM5", "Sony", "WH1000XM5/B", 12),
    ("Air Fryer Pro", "Philips", "HD9285", 24),
    ("iPad Air", "Apple", "A2588", 12),
]
SERVICE_CENTERS = [
    "Downtown Service Hub",
    "Northside Repair Center",
    "Tech District Service Point",
]
ISSUE_TYPES = ["warranty_claim", "repair_request", "replacement_request"]
REVIEWED_STATUSES = {TicketStatus.APPROVED, TicketStatus.REJECTED, TicketStatus.SCHEDULED}


async def _seed(count: int, rng: random.Random) -> list[tuple[str, str]]:
    await init_db()
    statuses = list(TicketStatus)
    created: list[tuple[str, str]] = []
    now = utc_now()

    async with AsyncSessionLocal() as session:
        for index in range(count):
            suffix = uuid.uuid4().hex[:8]
            status = statuses[index % len(statuses)]
            name, brand, model, warranty_months = rng.choice(PRODUCTS)

            user = User(
                name=f"Customer {suffix}",
                email=f"customer.{suffix}@example.com",
                phone=f"555{rng.randint(1000000, 9999999)}" if index % 3 else None,
            )
            product = Product(name=name, brand=brand, model=model, warranty_months=warranty_months)
            session.add_all([user, product])
            await session.flush()

            purchase = Purchase(
                user_id=user.id,
                product_id=product.id,
                invoice_number=f"INV-{now:%Y}-{suffix.upper()}",
                invoice_file_url=f"https://files.example.com/invoices/{suffix}.pdf",
                purchase_date=now - timedelta(days=rng.randint(30, 300)),
            )
            session.add(purchase)
            await session.flush()

            ticket = Ticket(
                user_id=user.id,
                purchase_id=purchase.id,
                issue_type=rng.choice(ISSUE_TYPES),
                description=f"{name} stopped working as expected.",
                status=status.value,
            )
            session.add(ticket)
            await session.flush()

            session.add(
                AgentLog(
                    ticket_id=ticket.id,
                    action="extract_invoice",
                    success=status != TicketStatus.PENDING,
                    details=f"invoice={purchase.invoice_number}",
                )
            )
            if status in REVIEWED_STATUSES:
                session.add(
                    ManagerAction(
                        ticket_id=ticket.id,
                        approved=status != TicketStatus.REJECTED,
                        remarks="Receipt does not match product serial."
                        if status == TicketStatus.REJECTED
                        else "Within warranty period.",
                        action_date=now - timedelta(days=1),
                    )
                )
            if status == TicketStatus.SCHEDULED:
                session.add(
                    ServiceAppointment(
                        ticket_id=ticket.id,
                        service_center=rng.choice(SERVICE_CENTERS),
                        appointment_date=now + timedelta(days=rng.randint(2, 14)),
                    )
                )
            created.append((str(ticket.tracking_code), status.value))

        await session.commit()
    await dispose_db()
    return created


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Seed demo warranty tickets covering every status."
    )
    parser.add_argument("--count", type=int, default=10, help="Number of tickets to create.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data.")
    return parser.parse_args()


def main() -> None:
    setup_logging()
    args = _parse_args()
    if args.count < 1:
        raise SystemExit("--count must be at least 1")

    created = asyncio.run(_seed(args.count, random.Random(args.seed)))
    for tracking_code, status in created:
        print(f"{tracking_code}  {status}")
    print(f"Seeded {len(created)} tickets")


if __name__ == "__main__":
    main()
