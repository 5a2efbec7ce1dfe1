import argparse
import logging
import sys

from qbank_admin.core.config import get_settings
from qbank_admin.core.database import Store
from qbank_admin.seed import clear, counts, seed

logger = logging.getLogger(__name__)


def _store() -> Store:
    settings = get_settings()
    if not settings.DATABASE_URL:
        raise SystemExit("DATABASE_URL is not set")
    return Store(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


def cmd_init_db(args, store: Store) -> int:
    store.create_all()
    print("schema created")
    return 0


def cmd_reset_db(args, store: Store) -> int:
    if not args.yes:
        print("refusing to drop every table without --yes")
        return 1
    print("Resetting the database...")
    store.drop_all(); store.create_all()
    print("Database has been reset successfully!")
    return 0


def cmd_seed(args, store: Store) -> int:
    print("Seeding database...")
    store.create_all()
    with store.session() as db:
        if not args.no_clear:
            clear(db)
        seed(db)
        db.commit()
        summary = counts(db)
    print("Seed complete:")
    for table, n in summary.items():
        print(f"  {table:<12} {n}")
    return 0


def cmd_serve(args, store: Store) -> int:
    import uvicorn
    settings = get_settings()
    uvicorn.run("qbank_admin.main:app", host=args.host or settings.HOST, port=args.port or settings.PORT,
                reload=args.reload, log_level=settings.LOG_LEVEL.lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="qbank-admin", description="QBank Admin maintenance commands")
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("init-db", help="create missing tables").set_defaults(func=cmd_init_db)
    p = sub.add_parser("reset-db", help="drop and recreate every table")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(func=cmd_reset_db)
    p = sub.add_parser("seed", help="load the demo question bank")
    p.add_argument("--no-clear", action="store_true", help="keep existing rows")
    p.set_defaults(func=cmd_seed)
    p = sub.add_parser("serve", help="run the API with uvicorn")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.add_argument("--reload", action="store_true")
    p.set_defaults(func=cmd_serve, needs_store=False)
    return ap


def main(argv=None, store: Store = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, get_settings().LOG_LEVEL.upper(), logging.INFO))
    owned = store is None and getattr(args, "needs_store", True)
    if owned:
        store = _store()
    try:
        return args.func(args, store)
    except Exception:
        logger.exception(f"{args.command} failed")
        return 1
    finally:
        if owned:
            store.dispose()


if __name__ == "__main__":
    sys.exit(main())
