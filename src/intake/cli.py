import os
import sys
from pathlib import Path
import typer
from intake.config import settings
from intake.logging import configure_logging, logger

app = typer.Typer(no_args_is_help=True)

@app.callback()
def main():
    """
    User intake service CLI.
    """
    configure_logging(settings.LOG_LEVEL)

@app.command(name="serve")
def serve(
    host: str = typer.Option(None, help="Bind address (default: HOST setting)"),
    port: int = typer.Option(None, help="Bind port (default: PORT setting)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP server."""
    import uvicorn
    host = host or settings.HOST
    port = port or settings.PORT
    logger.info(f"Starting HTTP server on {host}:{port} ...")
    uvicorn.run(
        "intake.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
    )

@app.command(name="doctor")
def doctor():
    """
    Check upload storage and database configuration.
    """
    logger.info("Running doctor check...")

    failures: list[str] = []
    passed = 0

    print("\n🩺 Intake Doctor\n")

    # ── Check 1: Environment / Interpreter ──────────────────────────────────
    print("[Environment]")
    print(f"  Python: {sys.version.split()[0]}")
    print(f"  Prefix: {sys.prefix}")
    passed += 1

    # ── Check 2: Upload directory ────────────────────────────────────────────
    print("\n[Uploads]")
    upload_dir = Path(settings.UPLOAD_DIR)
    if upload_dir.exists():
        if upload_dir.is_dir() and os.access(upload_dir, os.W_OK):
            print(f"  {upload_dir}/   ✅ Exists and writable")
            passed += 1
        else:
            print(f"  {upload_dir}/   ❌ Not a writable directory")
            failures.append(f"{upload_dir} is not a writable directory — check permissions")
    else:
        parent = upload_dir.absolute().parent
        if os.access(parent, os.W_OK):
            print(f"  {upload_dir}/   ✅ Does not exist yet; will be created on start")
            passed += 1
        else:
            print(f"  {upload_dir}/   ❌ Missing and {parent} is not writable")
            failures.append(f"cannot create {upload_dir} — {parent} is not writable")

    # ── Check 3: Database ────────────────────────────────────────────────────
    print("\n[Database]")
    if settings.database_url is None:
        print("  DB_USER/DB_HOST/DB_NAME:     ⚠️  Not set — service will run WITHOUT database")
        passed += 1
    else:
        from sqlalchemy.exc import SQLAlchemyError
        from intake.infra.db.engine import create_db_engine, init_db
        engine = create_db_engine(settings.database_url)
        try:
            init_db(engine)
            print("  Connection:                  ✅ Reachable, schema ready")
            passed += 1
        except SQLAlchemyError as e:
            print(f"  Connection:                  ❌ {e.__class__.__name__}")
            failures.append(f"database unreachable: {e}")
        finally:
            engine.dispose()

    # ── Summary ──────────────────────────────────────────────────────────────
    total = passed + len(failures)
    print(f"\n{'─' * 50}")
    if failures:
        print(f"Result: {passed}/{total} checks passed\n")
        for msg in failures:
            print(f"  ❌ {msg}")
        print()
        raise typer.Exit(code=1)
    else:
        print(f"Result: {passed}/{total} checks passed — all good ✅")
        print()


db_app = typer.Typer(help="Database management commands.")
app.add_typer(db_app, name="db")

@db_app.command("init")
def init():
    """Create the users table and backfill legacy columns."""
    from sqlalchemy.exc import SQLAlchemyError
    from intake.infra.db.engine import create_db_engine, init_db
    if settings.database_url is None:
        print("❌ Database is not configured (set DB_USER, DB_HOST, DB_NAME or DATABASE_URL)")
        raise typer.Exit(code=1)
    engine = create_db_engine(settings.database_url)
    try:
        init_db(engine)
        logger.info("Database initialized successfully.")
        print("✅ Database initialized.")
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize database: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)
    finally:
        engine.dispose()

@app.command("submit")
def submit(
    name: str = typer.Option(..., help="User name"),
    email: str = typer.Option("", help="Email address"),
    phone: str = typer.Option("", help="Phone number"),
    city: str = typer.Option("", help="City"),
    image: Path = typer.Option(..., exists=True, dir_okay=False, help="Image file"),
    pdf: Path = typer.Option(..., exists=True, dir_okay=False, help="PDF file"),
    base_url: str = typer.Option("http://127.0.0.1:8080", help="Service base URL"),
):
    """Post one user with both files to /api/users."""
    import httpx
    from intake.client import APIError, IntakeClient
    try:
        with IntakeClient(base_url) as client:
            result = client.create_user(
                name=name, email=email, phone=phone, city=city, image=image, pdf=pdf,
            )
    except APIError as e:
        print(f"❌ {e}")
        raise typer.Exit(code=1)
    except httpx.HTTPError as e:
        print(f"❌ Cannot reach {base_url}: {e}")
        raise typer.Exit(code=1)
    print(f"✅ {result.message}")

if __name__ == "__main__":
    app()
