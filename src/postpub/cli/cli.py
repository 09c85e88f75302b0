"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from postpub.cli.commands import build_cmd, check_cmd, feed_cmd, tags_cmd


app = typer.Typer(name="postpub", no_args_is_help=True, help="Front-matter Markdown posts -> validated document model")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log pipeline progress")] = False,
    ):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


app.command(name="build")(build_cmd)
app.command(name="check")(check_cmd)
app.command(name="feed")(feed_cmd)
app.command(name="tags")(tags_cmd)
