#!/usr/bin/env python3
"""
Database seeding script for development.
Creates an admin, a demo client with projects in several states,
milestones, notifications and a contact request.
"""

import asyncio
import sys
from pathlib import Path
from datetime import datetime, timedelta

# Add parent directory to path to import our modules
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from atelier.database import async_engine, Base, AsyncSessionLocal
from atelier.models import (
    Contact,
    Milestone,
    MilestoneStatus,
    Notification,
    Project,
    ProjectStatus,
    User,
    UserRole,
)
from atelier.services.auth_service import AuthService

DEMO_PASSWORD = "Welkom123!"


async def create_tables():
    """Create all database tables"""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✓ Database tables created")


async def seed_data():
    """Seed the database with sample data"""
    async with AsyncSessionLocal() as session:
        try:
            password_hash = AuthService.hash_password(DEMO_PASSWORD)

            admin = User(
                username="admin",
                email="admin@digitaal-atelier.nl",
                password_hash=password_hash,
                name="Atelier Admin",
                role=UserRole.ADMIN.value,
                verified=True,
                preferences={},
            )
            client = User(
                username="demo",
                email="demo@example.com",
                password_hash=password_hash,
                name="Demo Client",
                company="Bakkerij de Molen",
                role=UserRole.CLIENT.value,
                verified=True,
                preferences={},
            )
            session.add_all([admin, client])
            await session.flush()
            print("✓ Created users")

            now = datetime.utcnow()
            webshop = Project(
                user_id=client.id,
                name="Webshop voor broodbestellingen",
                type="ecommerce",
                description="Online bestellen en ophalen in de winkel, met iDEAL betalingen.",
                status=ProjectStatus.IN_PROGRESS.value,
                start_date=now - timedelta(days=21),
                end_date=now + timedelta(days=30),
                budget="5000-10000",
                meta_data={"services": ["design", "development"], "has_domain": True},
            )
            website = Project(
                user_id=client.id,
                name="Nieuwe bedrijfswebsite",
                type="website",
                description="Een moderne website met openingstijden, assortiment en contactformulier.",
                status=ProjectStatus.PENDING.value,
                budget="2500-5000",
                meta_data={"services": ["design"], "has_logo": False},
            )
            session.add_all([webshop, website])
            await session.flush()
            print("✓ Created projects")

            session.add_all([
                Milestone(
                    project_id=webshop.id,
                    title="Ontwerp",
                    description="Wireframes en visueel ontwerp",
                    status=MilestoneStatus.COMPLETED.value,
                    due_date=now - timedelta(days=7),
                    completed_date=now - timedelta(days=8),
                    order=1,
                ),
                Milestone(
                    project_id=webshop.id,
                    title="Ontwikkeling",
                    description="Productcatalogus, winkelwagen en betalingen",
                    status=MilestoneStatus.IN_PROGRESS.value,
                    due_date=now + timedelta(days=14),
                    order=2,
                ),
                Milestone(
                    project_id=webshop.id,
                    title="Lancering",
                    description="Livegang en overdracht",
                    due_date=now + timedelta(days=30),
                    order=3,
                ),
            ])
            print("✓ Created milestones")

            session.add_all([
                Notification(
                    user_id=client.id,
                    title="Project approved",
                    message=f'Your project "{webshop.name}" has been approved.',
                    type="success",
                    link=f"/dashboard/projects/{webshop.id}",
                ),
                Notification(
                    user_id=admin.id,
                    title="New project request",
                    message=f'{client.name} submitted a new project: "{website.name}".',
                    link=f"/admin/projects/{website.id}",
                ),
            ])
            session.add(Contact(
                name="Jan Jansen",
                email="jan@example.com",
                company="Jansen Installatietechniek",
                service="website",
                message="Wij zoeken een nieuwe website met een offerteformulier.",
            ))

            await session.commit()
            print("\n✅ Database seeding completed successfully!")

            # Print summary
            print("\nSummary:")
            print(f"  - Users: 2 (login with password {DEMO_PASSWORD})")
            print(f"  - Projects: 2")
            print(f"  - Milestones: 3")

        except Exception as e:
            await session.rollback()
            print(f"❌ Error seeding database: {e}")
            raise


async def main():
    """Main function"""
    print("Starting database seeding...\n")

    # Optionally create tables first (useful for fresh databases)
    # Uncomment the next line if you want to create tables before seeding
    # await create_tables()

    await seed_data()


if __name__ == "__main__":
    asyncio.run(main())
