# launcher.py
"""
PayTrack launcher.

    python launcher.py serve [--host 0.0.0.0] [--port 8000]
    python launcher.py create-admin
"""
import argparse
import getpass
import logging
import sys

from dotenv import load_dotenv

ENV_FILE = ".env"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - [Launcher] - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def prompt(label: str) -> str:
    value = input(label).strip()
    while not value:
        value = input(label).strip()
    return value


def create_admin() -> int:
    """Interactively create the first admin. Refuses once an admin exists."""
    from sqlmodel import Session

    from app.db.engine_sync import create_sync_db_and_tables, sync_engine
    from app.services.user_service import MIN_PASSWORD_LENGTH, UserService

    create_sync_db_and_tables()

    with Session(sync_engine) as session:
        service = UserService(session)
        if service.admin_exists():
            print("❌ An admin account already exists. Setup disabled.")
            return 1

        print("=" * 60)
        print("🔐 CREATE ADMINISTRATOR")
        print("=" * 60)

        name = prompt("👤 Name: ")
        email = prompt("📧 Email: ")

        while True:
            password = getpass.getpass("🔑 Password: ")
            if len(password) < MIN_PASSWORD_LENGTH:
                print(f"❌ At least {MIN_PASSWORD_LENGTH} characters.")
                continue
            if getpass.getpass("🔑 Confirm: ") == password:
                break
            print("❌ Passwords do not match.")

        try:
            service.create_first_admin(email, password, name)
        except (ValueError, PermissionError) as e:
            print(f"❌ {e}")
            return 1

    print(f"\n✅ Administrator '{email}' created.\n")
    return 0


def serve(host: str, port: int, reload: bool) -> int:
    import uvicorn

    from app.core.bootstrap import bootstrap_system

    bootstrap_system()
    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=reload,
        proxy_headers=True,
        server_header=False,
    )
    return 0


def main(argv=None) -> int:
    load_dotenv(ENV_FILE)

    parser = argparse.ArgumentParser(description="PayTrack payment verification server")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Bootstrap the database and run the API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    subparsers.add_parser("create-admin", help="Create the first admin account")

    args = parser.parse_args(argv)
    if args.command == "serve":
        return serve(args.host, args.port, args.reload)
    return create_admin()


if __name__ == "__main__":
    sys.exit(main())
