"""
CLI entry point for the Registrar academic record engine.

Commands:
- grade: Convert a percentage grade
- init-db: Create database tables
- serve: Start the API server
"""
import argparse
import logging
import sys

from registrar.config import settings


def grade(args):
    """Convert a percentage grade to letter grade, grade points and quality points."""
    from registrar.errors import ValidationError
    from registrar.services.grading import convert_grade

    try:
        info = convert_grade(args.percentage, args.credits)
    except ValidationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Percentage:     {info.percentage_grade}")
    print(f"Letter grade:   {info.letter_grade.value}")
    print(f"Grade points:   {info.grade_points}")
    print(f"Quality points: {info.quality_points} ({args.credits} credit(s))")
    print(f"Passing:        {'yes' if info.is_passing else 'no'}")


def init_db(args):
    """Create all database tables."""
    from registrar.models.database import get_engine, init_db as create_tables

    engine = get_engine(args.database_url)
    create_tables(engine)
    print(f"Database tables created at {engine.url.render_as_string(hide_password=True)}")


def serve(args):
    """Start the API server."""
    import uvicorn

    print(f"Starting {settings.app_name} API on http://{args.host}:{args.port}")
    print(f"API docs available at http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "registrar.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


def main():
    """Main CLI entry point."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(
        description="Registrar - academic record computation engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Grade command
    grade_parser = subparsers.add_parser("grade", help="Convert a percentage grade")
    grade_parser.add_argument("percentage", type=float, help="Percentage grade, 0-100")
    grade_parser.add_argument("-c", "--credits", type=int, default=1,
                              help="Course credits for quality points")
    grade_parser.set_defaults(func=grade)

    # Init-db command
    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.add_argument("--database-url", help="Override REGISTRAR_DATABASE_URL")
    init_parser.set_defaults(func=init_db)

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=settings.api_host, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=settings.api_port, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=serve)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    args.func(args)


if __name__ == "__main__":
    main()
