"""
Serve command: run the HTTP API.
"""
from .base import BaseCommand, EXIT_OK


class ServeCommand(BaseCommand):
    """Start the FastAPI server."""

    async def execute(self) -> int:
        # Imported here so the CLI does not load the web stack for analysis runs
        from ..api_server import serve
        from ..services.configuration_service import get_config_service

        # The API reads the shared service; fail on a broken config before binding the port
        get_config_service(self.args.config).get_config()
        print(f"🌐 Serving ComplexityTracker API on http://{self.args.host}:{self.args.port}")
        await serve(self.args.host, self.args.port)
        return EXIT_OK

    @classmethod
    def help(cls) -> str:
        return "Serve the analysis API over HTTP"

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
        parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
