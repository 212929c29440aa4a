import asyncio
import uuid

import httpx

BASE_URL = "http://127.0.0.1:8085"


async def register(client: httpx.AsyncClient, username: str, password: str):
    r = await client.post("/users/register", json={"username": username, "password": password})
    if r.status_code == 200:
        print(f"✅ {password}: registered {username}")
    elif r.status_code == 409:
        print(f"❌ {password}: {r.json()['message']}")
    else:
        print(f"⚠️  {password}: unexpected response {r.status_code} {r.text}")
    return r.status_code


async def main():
    username = f"race-{uuid.uuid4().hex[:6]}"
    print(f"\n⚡ Registering '{username}' from 5 concurrent callers...")

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=10) as client:
        statuses = await asyncio.gather(
            *(register(client, username, f"caller-{i}") for i in range(5))
        )

    # the unique index on users.username lets exactly one through
    print(f"\n📦 Successful registrations: {statuses.count(200)} (expected 1)")


if __name__ == "__main__":
    asyncio.run(main())
