import click

from cli import __version__
from cli.commands.serve_cmd import serve


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(
    __version__, "-v", "--version", help="Show the CLI version and exit."
)
def cli():
    """S3 bucket proxy"""
    pass


cli.add_command(serve)


def main():
    cli()


if __name__ == "__main__":
    main()
