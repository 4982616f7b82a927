"""Database seeder for local development and benchmark runs."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta

from sqlalchemy import insert

from article_api.database import engine, async_session, Base
from article_api.models import articles_table

TOPICS = ["python", "fastapi", "postgresql", "redis", "docker", "kubernetes",
          "typescript", "aws", "devops", "testing", "performance", "security"]


async def seed(small: bool = False):
    num_articles = 100 if small else 10000
    print(f"Seeding: {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        batch_size = 500
        for batch_start in range(0, num_articles, batch_size):
            batch_end = min(batch_start + batch_size, num_articles)
            rows = []
            for i in range(batch_start, batch_end):
                created = datetime.now(timezone.utc) - timedelta(
                    days=random.randint(0, 365), seconds=random.randint(0, 86399)
                )
                topic = random.choice(TOPICS)
                rows.append({
                    "title": f"Article {i}: A practical guide to {topic}",
                    "content": f"This is the full content of article {i} about {topic}. " * 20,
                    # Roughly a third of the articles carry a cover photo.
                    "photo_url": f"https://picsum.photos/seed/{i}/800/400" if random.random() < 0.33 else None,
                    "created_at": created,
                    "updated_at": created + timedelta(hours=random.randint(0, 48)),
                })
            await session.execute(insert(articles_table), rows)
            print(f"  Batch {batch_start}-{batch_end}: articles created")

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Articles: {num_articles}")


def main():
    parser = argparse.ArgumentParser(description="Seed the articles database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (100 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
