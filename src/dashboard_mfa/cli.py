import asyncio

import typer
import uvicorn

app = typer.Typer(help="Dashboard 2FA CLI")


@app.command()
def run(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """
    Run the FastAPI server
    """
    uvicorn.run(
        "dashboard_mfa.main:app",
        host=host,
        port=port,
        reload=reload,
    )


async def _create_tables() -> None:
    from dashboard_mfa.core.postgres import Base, engine
    from dashboard_mfa import models  # noqa: F401  registers tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


@app.command("create-tables")
def create_tables() -> None:
    """
    Create the users and two_factor_methods tables if they do not exist
    """
    asyncio.run(_create_tables())
    typer.echo("Tables created")


if __name__ == "__main__":
    app()
