import click

from coralls import __version__
from coralls.cli.lsp import lsp


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="coralls")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Coral language server CLI"""
    if ctx.invoked_subcommand is None:
        # Show help when no subcommand is provided
        click.echo(ctx.get_help())


cli.add_command(lsp)


if __name__ == "__main__":
    cli()
