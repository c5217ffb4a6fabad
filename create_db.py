"""Create the catalog schema (and the admin account, if configured) without
starting the server. Reads DATABASE_URL, ADMIN_USERNAME and ADMIN_PASSWORD
from the environment or a .env file next to this script."""
import os
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import inspect

from mcbuildlib.db.engine import init_db, make_engine
from mcbuildlib.services.seed_admin import seed_admin


def main():
    load_dotenv(dotenv_path=Path(__file__).with_name(".env"))
    engine = make_engine(os.environ.get("DATABASE_URL"))

    init_db(engine)
    tables = sorted(inspect(engine).get_table_names())
    print(f"{engine.url.render_as_string(hide_password=True)}: {', '.join(tables)}")

    if seed_admin(engine, os.environ.get("ADMIN_USERNAME"), os.environ.get("ADMIN_PASSWORD")):
        print(f"Seeded admin user '{os.environ['ADMIN_USERNAME']}'")


if __name__ == "__main__":
    main()
