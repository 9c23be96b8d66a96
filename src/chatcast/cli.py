"""chatcast command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(help="chatcast live chat CLI", no_args_is_help=True)


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, help="Bind host (defaults to config)"),
    port: int | None = typer.Option(None, help="Bind port (defaults to config)"),
    config: Path = typer.Option(Path("configs/default.yaml"), help="App config yaml"),
) -> None:
    """Start the chat server."""
    from chatcast.server.app import serve as run_server

    run_server(host=host, port=port, config_path=config)


@app.command("send")
def send(
    message: str = typer.Argument(..., help="Message text"),
    room: str = typer.Option("lobby", help="Room name"),
    username: str = typer.Option(..., help="Sender name"),
    url: str = typer.Option("http://127.0.0.1:8000", help="Server base URL"),
) -> None:
    """Publish one message."""
    from chatcast.client import ChatClient
    from chatcast.messages import Message

    with ChatClient(url) as client:
        result = client.send(Message(room=room, username=username, message=message))
    typer.echo(f"{result['status']} ({result['receivers']} receivers)")


@app.command("listen")
def listen(
    url: str = typer.Option("http://127.0.0.1:8000", help="Server base URL"),
) -> None:
    """Print messages from the live stream until the server closes it."""
    from chatcast.client import ChatClient

    with ChatClient(url) as client:
        for message in client.listen():
            typer.echo(f"[{message.room}] {message.username}: {message.body}")


if __name__ == "__main__":
    app()
