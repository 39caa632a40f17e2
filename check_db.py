import asyncio
from motor.motor_asyncio import AsyncIOMotorClient
from app.config import settings


async def check():
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.MONGODB_DB_NAME]
    request_count = await db.work_requests.count_documents({})
    pending_count = await db.work_requests.count_documents({"status": "pending"})
    profile_count = await db.profiles.count_documents({})
    task_count = await db.personal_tasks.count_documents({})
    counter = await db.counters.find_one({"name": "work_order_id"})
    last_code = counter["value"] if counter else 0
    print(
        f"COUNT_STATUS: WorkRequests={request_count} (pending={pending_count}), "
        f"Profiles={profile_count}, PersonalTasks={task_count}, LastWorkOrder=WO-{last_code}"
    )
    client.close()

if __name__ == "__main__":
    asyncio.run(check())
