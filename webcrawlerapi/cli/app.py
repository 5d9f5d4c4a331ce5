"""Typer application entry point for the webcrawlerapi CLI."""

import typer

from webcrawlerapi.cli.commands import cancel as cancel_command
from webcrawlerapi.cli.commands import content as content_command
from webcrawlerapi.cli.commands import crawl as crawl_command
from webcrawlerapi.cli.commands import status as status_command

app = typer.Typer(no_args_is_help=True, name="webcrawlerapi")

app.command(name="crawl", help="Submit a crawl job and wait for the result")(
    crawl_command.crawl_command
)
app.command(name="status", help="Show the status of a crawl job")(
    status_command.status_command
)
app.command(name="cancel", help="Cancel a crawl job")(cancel_command.cancel_command)
app.command(name="content", help="Download the content of a finished job")(
    content_command.content_command
)


if __name__ == "__main__":
    app()
