"""Development data seeder for the Conduit API.

Every seeded user can log in with the password ``conduit2022``.
"""
import argparse
import asyncio
import random
import time
from datetime import timedelta

from conduit.database import engine, async_session, Base
from conduit.models import Article, ArticleTag, Comment, Favorite, Follow, User, utcnow
from conduit.security import get_password_hash
from conduit.services.article_service import slugify

SEED_PASSWORD = "conduit2022"

TAGS = ["python", "fastapi", "postgresql", "redis", "docker", "testing",
        "performance", "security", "react", "typescript", "devops", "rest-api"]

TOPICS = ["scaling", "debugging", "deploying", "testing", "securing", "profiling"]


async def seed(num_users: int, num_articles: int):
    print(f"Seeding: {num_users} users, {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    # Hash once; bcrypt is deliberately slow.
    password = get_password_hash(SEED_PASSWORD)

    async with async_session() as session:
        users = []
        for i in range(num_users):
            user = User(
                username=f"user_{i:03d}",
                email=f"user_{i:03d}@example.com",
                password=password,
                bio=f"I am seed user number {i}. I write about technology.",
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        for user in users:
            others = [u for u in users if u.id != user.id]
            for followed in random.sample(others, k=min(2, len(others))):
                session.add(Follow(user_id=user.id, following_id=followed.id))

        articles = []
        for i in range(num_articles):
            title = f"{random.choice(TOPICS).title()} {random.choice(TAGS)} applications, part {i}"
            created = utcnow() - timedelta(days=random.randint(0, 365))
            article = Article(
                slug=slugify(title),
                title=title,
                description=f"Notes on {title.lower()}.",
                body=f"This is the full body of article {i}. " * 20,
                created_at=created,
                updated_at=created,
                created_by=random.choice(users).id,
            )
            session.add(article)
            articles.append(article)
        await session.flush()
        print(f"  Created {len(articles)} articles")

        comment_count = 0
        for article in articles:
            for tag in random.sample(TAGS, k=random.randint(1, 4)):
                session.add(ArticleTag(article_slug=article.slug, tag=tag))
            for fan in random.sample(users, k=random.randint(0, len(users))):
                session.add(Favorite(user_id=fan.id, article_slug=article.slug))
            for _ in range(random.randint(0, 3)):
                session.add(Comment(
                    body="Great article! Very helpful for understanding the topic.",
                    article_slug=article.slug,
                    author_id=random.choice(users).id,
                ))
                comment_count += 1
        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Comments: {comment_count}")
    print(f"  Login with any user_NNN@example.com / {SEED_PASSWORD}")


def main():
    parser = argparse.ArgumentParser(description="Seed the Conduit database")
    parser.add_argument("--users", type=int, default=3, help="Number of users")
    parser.add_argument("--articles", type=int, default=20, help="Number of articles")
    args = parser.parse_args()
    asyncio.run(seed(args.users, args.articles))


if __name__ == "__main__":
    main()
