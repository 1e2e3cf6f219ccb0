# userservice/infra/init_db.py

import argparse
import sys

from userservice.config import get_settings
from userservice.infra.postgres import create_db_engine, init_db, check_connection
from userservice.utils.logger import setup_logger

def main(argv=None) -> int:
    """Create the users table (or just check the store) outside the server."""
    parser = argparse.ArgumentParser(description="Prepare the users table")
    parser.add_argument("--check", action="store_true", help="only test the connection")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logger(settings.LOG_LEVEL)
    engine = create_db_engine(settings)

    try:
        if not check_connection(engine):
            return 1
        if not args.check:
            init_db(engine)
    finally:
        engine.dispose()
    return 0

if __name__ == "__main__":
    sys.exit(main())
