import os
import sys

import uvicorn


def serve() -> None:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "true").strip().lower() in {"1", "true", "yes", "y"}

    uvicorn.run(
        "aqui.main:app",
        host=host,
        port=port,
        reload=reload,
    )


def main(argv: list[str]) -> int:
    command = argv[1] if len(argv) > 1 else "serve"
    if command == "serve":
        serve()
        return 0
    if command == "sweep":
        from aqui.jobs.auto_end_sessions import main as sweep

        return sweep()
    if command == "seed":
        from aqui.db.seed import seed

        seed()
        return 0
    print(f"usage: {argv[0]} [serve|sweep|seed]", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
