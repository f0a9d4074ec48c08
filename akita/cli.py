"""
The akita program: a command-line client for del.dog-style paste services.

    akita put [FILE] [--slug SLUG] [--content TEXT]
    akita get SLUG [--output FILE]
    akita config [--provider URL] [--user NAME --key KEY] [--reset]
    akita help

The app state handed to every handler is the AkitaClient, which carries the
loaded Config.
"""
import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from .app import App
from .commands import Command
from .client import AkitaClient, ClientError
from .config import Config, ConfigError, Credentials
from .flags import Flag, FlagKind
from .utils import *

logger = logging.getLogger(__name__)

console = Console(highlight=False)
errors = Console(stderr=True, highlight=False)


def setup_logging(environ=Unset):
    """
    Configure the root logger with a rich handler on stderr.

    The level comes from AKITA_LOG_LEVEL (default WARNING). Safe to call more
    than once: previous handlers are replaced.
    """
    environ = coalesce(environ, os.environ)
    level = getattr(logging, environ.get("AKITA_LOG_LEVEL", "WARNING").upper(), logging.WARNING)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(RichHandler(console=errors, level=level, show_path=False))

    if level > logging.DEBUG:
        for name in ("httpx", "httpcore"):
            logging.getLogger(name).setLevel(logging.WARNING)


def put(client, context):
    """upload a document from a file or from --content; prints its url"""
    content = context.get("content")
    if content is None:
        if not context.positionals:
            raise ClientError("no file specified")
        try:
            with open(context.positionals[0], encoding="utf-8") as file:
                content = file.read()
        except OSError as error:
            raise ClientError(f"{context.positionals[0]}: {error.strerror or error}") from error

    url = client.put_doc(context.get("slug"), content)
    console.print(Text.assemble("url: ", (url, "green")))


def get(client, context):
    """download a document by slug; prints it or writes it to --output"""
    if not context.positionals:
        raise ClientError("no slug specified")

    document = client.get_doc(context.positionals[0])

    if (output := context.get("output")) is not None:
        try:
            with open(output, "w", encoding="utf-8") as file:
                file.write(document)
        except OSError as error:
            raise ClientError(f"{output}: {error.strerror or error}") from error
        logger.info("wrote %s", output)
        return

    # documents are written verbatim, bypassing rich rendering
    console.file.write(document + "\n")
    console.file.flush()


def configure(client, context):
    """show the configuration, or update provider/credentials and save it"""
    config = client.config

    if not any(map(context.is_set, ("provider", "user", "key", "reset"))):
        table = Table.grid(padding=(0, 2))
        table.add_row("provider", Text(config.provider))
        table.add_row("user", Text(config.credentials.user if config.credentials else "-"))
        table.add_row("file", Text(str(config.path or "-")))
        console.print(table)
        return

    if context.is_set("user") != context.is_set("key"):
        raise ConfigError("--user and --key must be given together")

    if (provider := context.get("provider")) is not None:
        config.provider = provider
    if context.is_set("reset"):
        config.credentials = None
    if context.is_set("user"):
        config.credentials = Credentials(context.get("user"), context.get("key"))

    config.save()
    console.print(Text.assemble("saved ", (str(config.path), "green")))


def init(client, /, name="akita"):
    """
    Build the akita app around a client.
    """
    app = App(client, name)

    app.register(
        Command("put", put, "p")
        .flag(Flag("slug", "s", FlagKind.VALUE, "desired slug"))
        .flag(Flag("content", "c", FlagKind.VALUE, "document content"))
    )
    app.register(
        Command("get", get, "g")
        .flag(Flag("output", "o", FlagKind.VALUE, "file to write the document to"))
    )
    app.register(
        Command("config", configure)
        .flag(Flag("provider", "p", FlagKind.VALUE, "paste service url"))
        .flag(Flag("user", "u", FlagKind.VALUE, "account name"))
        .flag(Flag("key", "k", FlagKind.VALUE, "account api key"))
        .flag(Flag("reset", "r", FlagKind.SWITCH, "forget the stored credentials"))
    )

    @app.command("help", "h")
    def show_help(client, context):
        """list the available commands"""
        table = Table(box=None, show_header=False, padding=(0, 2))
        for command in app.commands:
            table.add_row(
                Text(command.ident, style="bold"),
                Text(command.alias or ""),
                Text(command.help or ""),
            )
        console.print(table)

    return app


def main(prompt=Unset, /):
    """
    Entry point of the akita program.

    Configuration and client errors are printed to stderr and end the process
    with exit status 1; parser faults are handled by App.run() the same way.
    """
    setup_logging()
    try:
        config = Config.load()
        with AkitaClient(config) as client:
            init(client).run(prompt)
    except (ConfigError, ClientError) as error:
        errors.print(Text.assemble(("error: ", "bold red"), str(error)))
        sys.exit(1)
