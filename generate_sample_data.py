import asyncio
from datetime import datetime, timedelta
import random
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient
from app.config import settings
from app.models.counter import Counter
from app.models.personal_task import PersonalTask, TaskPriority, TaskStatus
from app.models.profile import Profile, UserRole
from app.models.work_request import ChecklistItemIn, Priority, WorkRequest, to_datetime
from app.services import workflow
from app.services.work_order_ids import next_work_order_id
from app.api.routes.auth import get_password_hash


async def create_sample_data():
    """Populate database with sample staff, work requests and personal tasks"""
    print("🚀 Starting Sample Data Generation...")

    # Initialize Beanie
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    await init_beanie(
        database=client[settings.MONGODB_DB_NAME],
        document_models=[WorkRequest, PersonalTask, Profile, Counter]
    )

    # Sample staff
    staff = [
        ("Grace Miller", "grace.miller@church.org", "facilities", UserRole.MANAGER),
        ("Sam Ortiz", "sam.ortiz@church.org", "facilities", UserRole.EMPLOYEE),
        ("Ruth Chen", "ruth.chen@church.org", "worship", UserRole.EMPLOYEE),
    ]
    password_hash = get_password_hash("Staff123!")

    profiles = []
    for name, email, dept, role in staff:
        existing = await Profile.find_one(Profile.email == email)
        if existing:
            print(f"⏩ {email} already exists, skipping...")
            profiles.append(existing)
            continue

        profile = Profile(email=email, name=name, department=dept, role=role, password_hash=password_hash)
        await profile.insert()
        profiles.append(profile)
        print(f"✅ Created Profile: {name} ({role.value})")

    # Sample requests, spread over the last 60 days
    print("🛠️ Generating Work Requests...")
    departments = ["worship", "youth", "children", "admin", "facilities", "missions"]
    requests = [
        ("Replace stage lights", "Main sanctuary", "Two spotlights over the stage are out"),
        ("Fix leaking faucet", "Fellowship hall kitchen", "Cold tap drips constantly"),
        ("Set up chairs for conference", "Gym", "200 chairs in rows, aisle down the middle"),
        ("Repaint nursery wall", "Nursery", "Scuffs and crayon marks on the east wall"),
        ("HVAC not cooling", "Youth room", "Room gets above 80F on Sunday mornings"),
        ("Replace broken window", "Office 3", "Cracked pane after the storm"),
        ("Mow back lawn", "Back lawn", "Ahead of the church picnic"),
        ("Unclog restroom drain", "Men's restroom", "Second stall floor drain backs up"),
        ("Install projector screen", "Classroom B", "Mount the new screen above the whiteboard"),
        ("Fix parking lot light", "North parking lot", "Pole 4 flickers at night"),
    ]
    actor = profiles[0].display_name
    now = datetime.utcnow()

    for title, location, description in requests:
        existing = await WorkRequest.find_one(WorkRequest.title == title)
        if existing:
            print(f"⏩ '{title}' already exists, skipping...")
            continue

        created = now - timedelta(days=random.randint(1, 60), hours=random.randint(0, 23))
        requested = (created + timedelta(days=random.randint(1, 14))).date()
        dept = random.choice(departments)

        request = WorkRequest(
            work_order_id=await next_work_order_id(),
            requestor_name=f"{dept.title()} Team",
            requestor_email=f"{dept}@church.org",
            department=dept,
            title=title,
            description=description,
            location=location,
            priority=random.choice(list(Priority)),
            estimated_hours=random.choice([1, 2, 3, 4, 6, 8]),
            requested_date=to_datetime(requested),
            created_at=created,
            updated_at=created,
        )

        # Walk some requests through the workflow
        outcome = random.choice(["pending", "rejected", "approved", "in_progress", "paused", "completed"])
        if outcome == "rejected":
            workflow.reject(request, actor, "Out of scope for the facilities team", now=created + timedelta(hours=4))
        elif outcome != "pending":
            approved_at = created + timedelta(hours=6)
            workflow.approve(
                request, actor,
                checklist=[ChecklistItemIn(text="Gather supplies"), ChecklistItemIn(text="Confirm access")],
                now=approved_at,
            )
            if outcome in ("in_progress", "paused", "completed"):
                started_at = to_datetime(requested) + timedelta(hours=9)
                workflow.start(request, actor, now=started_at)
                if outcome == "paused":
                    workflow.pause(request, actor, now=started_at + timedelta(hours=1))
                elif outcome == "completed":
                    hours = random.choice([1, 2, 3, 5])
                    done_at = started_at + timedelta(days=random.choice([0, 0, 0, 1, 3]), hours=hours)
                    workflow.complete(request, actor, hours, "Done", now=done_at)

        await request.insert()
        print(f"✅ Created {request.work_order_id}: {title} ({request.status.value})")

    # Personal tasks for the first staff member
    print("📝 Generating Personal Tasks...")
    tasks = [
        ("Order replacement bulbs", TaskPriority.HIGH, TaskStatus.TODO),
        ("Call HVAC contractor", TaskPriority.URGENT, TaskStatus.IN_PROGRESS),
        ("Update key inventory", TaskPriority.LOW, TaskStatus.COMPLETED),
    ]
    owner = str(profiles[0].id)
    for title, priority, task_status in tasks:
        existing = await PersonalTask.find_one(PersonalTask.user_id == owner, PersonalTask.title == title)
        if not existing:
            await PersonalTask(user_id=owner, title=title, priority=priority, status=task_status).insert()

    print("✨ Sample Data Generation Complete!")
    client.close()

if __name__ == "__main__":
    asyncio.run(create_sample_data())
