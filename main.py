#!/usr/bin/env python3
"""
myFlix -- movie catalog API with user accounts and favorites.

Usage:
  python main.py serve
  python main.py serve --port 9000
  python main.py seed-movies movies.json

Environment variables:
  SECRET_KEY      Token signing key, at least 32 characters. Required unless DEBUG=true.
  CONNECTION_URI  SQLAlchemy database URL. Defaults to a SQLite file beside the project.
  PORT            Port for `serve`. Defaults to 8080. The server binds all interfaces.
  DEBUG           Set to true for a throwaway signing key during local development.
"""

import argparse
import sys
from pathlib import Path

from core.config import Settings, get_settings


def _serve(settings: Settings, port: int | None) -> int:
    import uvicorn

    from api.main import create_app

    uvicorn.run(create_app(settings), host="0.0.0.0", port=port or settings.port)  # nosec B104 -- hosted service
    return 0


def _seed_movies(settings: Settings, path: str) -> int:
    from catalog.seed import load_movies
    from catalog.store import MovieStore

    file_path = Path(path).resolve()
    if not file_path.is_file():
        print(f"  [!] '{path}' is not a readable file.")
        return 1
    store = MovieStore(settings.connection_uri)
    try:
        result = load_movies(file_path.read_text(encoding="utf-8"), store)
    except ValueError as e:
        print(f"  [!] Could not load '{path}': {e}")
        return 1
    finally:
        store.close()
    print(f"  Seeded {result.created} movie(s).")
    for error in result.errors:
        print(f"  [!] Skipped {error}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="myFlix movie catalog API")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--port", type=int, default=None, help="Override PORT")

    seed = sub.add_parser("seed-movies", help="Load movie documents from a JSON file")
    seed.add_argument("file", help="JSON array of movie documents")

    args = parser.parse_args(argv)
    settings = get_settings()

    if args.command == "serve":
        return _serve(settings, args.port)
    return _seed_movies(settings, args.file)


if __name__ == "__main__":
    sys.exit(main())
