import asyncio
import typer
from sqlalchemy.ext.asyncio import AsyncSession

import blog.db_models # noqa: F401

from blog.database import Base, engine, async_session_factory
from blog.users.schema import UserCreate
from blog.users.service import create_user
from blog.users.models import User as UserModel # 타입 힌트를 위해 임포트

cli = typer.Typer()

async def create_user_runner(name: str, email: str, password: str, role: str, db: AsyncSession):
    """비동기 로직을 실행하는 실제 러너 함수"""
    print("--- User Creation ---")
    try:
        user_data = UserCreate(name=name, email=email, password=password)

        print(f"Creating {role} user '{user_data.email}'...")
        user: UserModel = await create_user(user_data=user_data, db=db, role=role)

        print("\n✅ User created successfully!")
        print(f"   ID: {user.id}")
        print(f"   Email: {user.email}")
        print(f"   Role: {user.role}")

    except Exception as e:
        import traceback
        traceback.print_exc()
        print(f"\n❌ Error creating user: {e}")
        raise typer.Exit(code=1)
    finally:
        print("--- Task Finished ---")


@cli.command(name="init-db")
def init_db():
    """
    Creates all tables for the current DATABASE_URL (local development without alembic).
    """
    async def main():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(main())
    print("✅ Tables created")


@cli.command(name="create-user")
def createuser(
    name: str = typer.Option(..., "--name", "-n", help="User's display name."),
    email: str = typer.Option(..., "--email", "-e", help="User's email address."),
    password: str = typer.Option(..., "--password", "-p", help="User's password."),
    role: str = typer.Option("user", "--role", "-r", help="Role to assign ('user' or 'admin')."),
):
    """
    Creates a new user account directly in the database.
    """
    async def main():
        async with async_session_factory() as session:
            await create_user_runner(name=name, email=email, password=password, role=role, db=session)

    asyncio.run(main())

@cli.command()
def hello() -> None:
    print("Hello World")

if __name__ == "__main__":
    cli()
