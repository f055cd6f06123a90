import argparse
from datetime import date
from decimal import Decimal

from .database import SessionLocal, init_db
from .models.claim import Claim
from .schemas.claim import ClaimCreate
from .services.claims import ClaimWorkflowService


DEMO_CLAIMS = [
    ClaimCreate(lecturer_name="demo.lecturer@example.com", claim_period=date(2025, 9, 1),
                hours_worked=Decimal("40"), hourly_rate=Decimal("250.00")),
    ClaimCreate(lecturer_name="demo.lecturer@example.com", claim_period=date(2025, 10, 1),
                hours_worked=Decimal("120"), hourly_rate=Decimal("350.00")),
    ClaimCreate(lecturer_name="demo.other@example.com", claim_period=date(2025, 10, 1),
                hours_worked=Decimal("0"), hourly_rate=Decimal("200.00")),
]


def seed_demo_claims():
    init_db()
    service = ClaimWorkflowService.from_settings()

    db = SessionLocal()
    try:
        existing = db.query(Claim).count()
        if existing:
            print(f"Database already holds {existing} claims")
            print("No changes made. This is expected if you've already run this command.")
            return

        for data in DEMO_CLAIMS:
            claim = service.create_claim(db, data)
            claim = service.submit_for_review(db, claim.id)
            print(f"Created claim {claim.id} for {claim.lecturer_name}: {claim.status} (amount {claim.amount})")
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(prog="claimflow")
    parser.add_argument("command", choices=["init-db", "seed-demo"])
    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_db()
        print("Tables created")
    else:
        seed_demo_claims()


if __name__ == "__main__":
    main()
