#!/usr/bin/env python3

import rich_click as click

# Configure rich-click to enable markup - MUST be first!
click.rich_click.USE_RICH_MARKUP = True

# Dracula theme colors
click.rich_click.STYLE_OPTION = "#ff79c6"  # Dracula Pink - for option flags
click.rich_click.STYLE_ARGUMENT = "#8be9fd"  # Dracula Cyan - for argument types
click.rich_click.STYLE_COMMAND = "#50fa7b"  # Dracula Green - for subcommands
click.rich_click.STYLE_USAGE = "#bd93f9"  # Dracula Purple - for "Usage:" line
click.rich_click.STYLE_HELPTEXT = "#b3b8c0"  # Light gray - for help descriptions

"""
recognize-stream - Stream an audio file to the speech-to-text service
"""

import asyncio
import json
import sys
from pathlib import Path
from types import SimpleNamespace

from rich.console import Console

from . import __version__
from .core.config import ConfigLoader, get_config, setup_logging
from .core.logging import configure_logging
from .transcription.client import (
    EventKind,
    RecognizeStream,
    SpeechToTextClient,
    StaticTokenSource,
    TranscriptionError,
)


@click.command(context_settings={"allow_extra_args": False})
@click.version_option(version=__version__, prog_name="recognize-stream")
@click.argument("audio_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--url", help=" 🌐 Service URL (default: from config or RECOGNIZE_URL)")
@click.option("--model", help=" 🤖 Recognition model (default: from config or RECOGNIZE_MODEL)")
@click.option("--content-type", help=" 🎵 Audio content type; sniffed from the file header when omitted")
@click.option("--token", envvar="RECOGNIZE_TOKEN", help=" 🔑 Bearer token (env: RECOGNIZE_TOKEN)")
@click.option("--interim", is_flag=True, help=" ⏱️  Request interim results (visible with --json)")
@click.option("--json", "json_output", is_flag=True, help=" 📄 Print every service frame as one JSON line")
@click.option("--chunk-size", type=int, help=" 📦 Bytes per audio chunk (default: from config)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help=" ⚙️  Configuration file path")
@click.option("--debug", is_flag=True, help=" 🐛 Enable detailed debug logging")
def cli(audio_file, url, model, content_type, token, interim, json_output, chunk_size, config_path, debug):
    """🎙️ [bold cyan]recognize-stream[/bold cyan] - Transcribe an audio file over the recognize WebSocket

    \b
    Audio is streamed in chunks with flow control and transcripts are printed
    as the service finalizes them.

    \b
    [bold yellow]🎯 Quick Start:[/bold yellow]
    \b
      [green]recognize-stream speech.wav[/green]                      [italic]# Final text only[/italic]
      [green]recognize-stream speech.flac --json --interim[/green]    [italic]# Every result frame as JSON[/italic]
      [green]recognize-stream speech.raw --content-type "audio/l16;rate=16000"[/green]
    """
    args = SimpleNamespace(
        audio_file=audio_file,
        url=url,
        model=model,
        content_type=content_type,
        token=token,
        interim=interim,
        json=json_output,
        chunk_size=chunk_size,
        config=config_path,
        debug=debug,
    )
    try:
        exit_code = asyncio.run(async_main_worker(args))
    except KeyboardInterrupt:
        Console(stderr=True).print("\n[yellow]Interrupted by user[/yellow]")
        exit_code = 130
    if exit_code:
        sys.exit(exit_code)


async def async_main_worker(args) -> int:
    """Stream one file and print the results; returns the process exit code."""
    console = Console(stderr=True)
    config = ConfigLoader(args.config) if args.config else get_config()

    configure_logging(config, level="DEBUG" if args.debug else None)
    logger = setup_logging(__name__)

    client = SpeechToTextClient(
        url=args.url,
        token_source=StaticTokenSource(args.token) if args.token else None,
        config=config,
    )
    params = {}
    if args.model:
        params["model"] = args.model
    if args.content_type:
        params["content-type"] = args.content_type
    if args.interim:
        params["interim_results"] = True

    stream = client.recognize_using_websocket(structured=args.json, **params)
    chunk_size = args.chunk_size or config.chunk_size

    producer = asyncio.create_task(_send_file(stream, args.audio_file, chunk_size, logger))
    try:
        exit_code = await _print_results(stream, args.json, args.debug, console)
    finally:
        await asyncio.gather(producer, return_exceptions=True)
        await stream.wait_closed()
    return exit_code


async def _send_file(stream: RecognizeStream, path: Path, chunk_size: int, logger) -> None:
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                await stream.write(chunk)
    except TranscriptionError as e:
        # Also delivered as the stream's terminal event
        logger.debug(f"Stopped sending audio: {e}")
        return
    await stream.finish()


async def _print_results(stream: RecognizeStream, json_output: bool, debug: bool, console: Console) -> int:
    async for event in stream.events():
        if event.kind is EventKind.OPEN:
            if debug:
                transaction_id = await stream.get_transaction_id()
                console.print(f"[dim]Transaction id: {transaction_id}[/dim]")
        elif event.kind is EventKind.DATA:
            click.echo(event.data)
        elif event.kind is EventKind.RESULT:
            click.echo(json.dumps(event.data))
        elif event.kind is EventKind.ERROR:
            console.print(f"[red]Error: {event.error}[/red]")
            return 1
        elif event.kind is EventKind.CLOSE and debug:
            console.print(f"[dim]Connection closed ({event.code}) {event.reason}[/dim]")
    return 0


def main():
    """Entry point for the recognize-stream CLI"""
    # Ensure stdout is unbuffered for piping
    sys.stdout.reconfigure(line_buffering=True)
    cli()


if __name__ == "__main__":
    main()
