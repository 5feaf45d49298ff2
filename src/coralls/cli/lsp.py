import click
import signal
from typing import Optional
from coralls.lsp.server import CoralLSPServer
from coralls.cli.utils import output_error, configure_logging, get_env_flag


@click.command(name="lsp")
@click.option("--port", type=int, help="Port number for LSP server (defaults to 3000)")
@click.option("--host", default="localhost", help="Host to bind to when using TCP mode (defaults to localhost)")
@click.option("--tcp", is_flag=True, help="Use TCP instead of stdio for LSP communication")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
@click.option("--drop-stale", is_flag=True, help="Do not publish diagnostics of superseded validations")
def lsp(port: Optional[int], host: str, tcp: bool, debug: bool, drop_stale: bool):
    """Start the Coral LSP server.

    The server reports all-uppercase words as warnings and offers completion
    for Coral keywords and built-in functions.

    By default, the server uses stdio for communication (suitable for IDE integration).
    Use --tcp flag for testing or when stdio communication is not suitable.

    Examples:
        coralls lsp                     # Start LSP server using stdio
        coralls lsp --tcp               # Start LSP server using TCP on localhost:3000
        coralls lsp --tcp --port 4000   # Start LSP server using TCP on localhost:4000
        coralls lsp --drop-stale        # Only publish the newest validation per document
        coralls lsp --debug             # Start with detailed debug logging
    """
    # Get values from environment variables if not set by flags
    if not drop_stale:
        drop_stale = get_env_flag("CORALLS_DROP_STALE")

    configure_logging(debug)

    try:
        final_port = port or 3000

        # Set up signal handler for graceful shutdown
        def signal_handler(signum, frame):
            raise KeyboardInterrupt()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        server = CoralLSPServer(port=final_port, drop_stale=drop_stale)

        if tcp:
            click.echo(f"Starting Coral LSP server on {host}:{final_port}", err=True)
            server.start(host=host, use_tcp=True)
        else:
            server.start(host=host, use_tcp=False)

    except KeyboardInterrupt:
        click.echo("\nLSP server stopped", err=True)
    except Exception as e:
        output_error(e, debug=debug)
