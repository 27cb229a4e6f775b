"""CLI entrypoint for Gemini Nexus."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Callable, Sequence
from dataclasses import replace
from importlib import metadata
from pathlib import Path
import sys
from typing import Any

from .attachments import PendingAttachments
from .chat import GeminiChat
from .config import ensure_config_dir, load_config
from .conversation import Conversation
from .exceptions import ConfigurationError
from .logging_utils import configure_logging
from .models import MODEL_OPTIONS, Message, ModelConfig

HELP_TEXT = (
    "Commands: /image <path> attach an image, /drop remove pending images, "
    "/clear reset the conversation, /models list models, /model [name] show or "
    "pick a model, /search on|off, /think on|off, /budget <tokens>, "
    "/temp <0-1>, /settings show settings, /quit exit."
)

_SWITCHES = {"on": True, "off": False}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini-nexus",
        description="Gemini Nexus - terminal chat with Google Gemini models",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    parser.add_argument("--model", help="Model name for this session")
    parser.add_argument(
        "--temperature", type=float, help="Sampling temperature between 0 and 1"
    )
    parser.add_argument(
        "--search", action="store_true", help="Enable Google Search grounding"
    )
    parser.add_argument(
        "--thinking", action="store_true", help="Enable the thinking budget"
    )
    parser.add_argument("--thinking-budget", type=int, help="Thinking token budget")
    return parser


def _session_config(args: argparse.Namespace, config: dict[str, Any]) -> ModelConfig:
    model_config = ModelConfig.from_config(config)
    overrides: dict[str, Any] = {}
    if args.model:
        overrides["model_name"] = args.model
    if args.temperature is not None:
        overrides["temperature"] = args.temperature
    if args.search:
        overrides["use_search"] = True
    if args.thinking:
        overrides["use_thinking"] = True
    if args.thinking_budget is not None:
        overrides["thinking_budget"] = args.thinking_budget
    return replace(model_config, **overrides).validate()


def describe_settings(model_config: ModelConfig) -> str:
    """Summarize the per-turn settings in one line."""
    thinking = (
        f"on ({model_config.thinking_budget} tokens)"
        if model_config.use_thinking
        else "off"
    )
    return (
        f"model: {model_config.model_name}, temperature: {model_config.temperature}, "
        f"search: {'on' if model_config.use_search else 'off'}, thinking: {thinking}"
    )


def _model_choices(model_config: ModelConfig) -> str:
    lines = []
    for value, label in MODEL_OPTIONS:
        marker = "*" if value == model_config.model_name else " "
        lines.append(f"{marker} {value}  {label}")
    return "\n".join(lines)


def _switch(argument: str) -> bool:
    try:
        return _SWITCHES[argument.lower()]
    except KeyError:
        raise ConfigurationError(f"Expected on or off, got {argument!r}.") from None


def apply_setting(model_config: ModelConfig, command: str, argument: str) -> ModelConfig:
    """Return a validated copy of ``model_config`` with one setting changed.

    Raises:
        ConfigurationError: when the argument is malformed or out of range.
    """
    if command == "/model":
        changes: dict[str, Any] = {"model_name": argument}
    elif command == "/search":
        changes = {"use_search": _switch(argument)}
    elif command == "/think":
        changes = {"use_thinking": _switch(argument)}
    elif command == "/budget":
        try:
            changes = {"thinking_budget": int(argument)}
        except ValueError:
            raise ConfigurationError(
                f"thinking budget must be an integer, got {argument!r}."
            ) from None
    elif command == "/temp":
        try:
            changes = {"temperature": float(argument)}
        except ValueError:
            raise ConfigurationError(
                f"temperature must be a number, got {argument!r}."
            ) from None
    else:
        raise ConfigurationError(f"Unknown setting {command}.")
    return replace(model_config, **changes).validate()


def format_message(message: Message) -> str:
    """Render a reply as plain text with citations and token counts."""
    lines = [message.text]
    details = message.metadata
    if details is not None:
        sources = details.web_sources
        if sources:
            lines.append("Sources:")
            lines.extend(
                f"  [{index}] {source.title or source.uri} <{source.uri}>"
                for index, source in enumerate(sources, start=1)
            )
        if details.usage is not None:
            usage = details.usage
            lines.append(
                f"(in: {usage.prompt_tokens}, out: {usage.candidates_tokens}, "
                f"total: {usage.total_tokens})"
            )
    return "\n".join(lines)


async def run_repl(
    conversation: Conversation,
    model_config: ModelConfig,
    pending: PendingAttachments,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    """Read lines until EOF or /quit, sending each as a turn."""
    write(HELP_TEXT)
    while True:
        try:
            line = await asyncio.to_thread(read_line, "you> ")
        except EOFError:
            return
        stripped = line.strip()
        if stripped in {"/quit", "/exit"}:
            return
        if stripped.startswith("/image "):
            if pending.add(stripped.removeprefix("/image ").strip()) is None:
                write("Could not attach that image.")
            else:
                write(f"{len(pending)} image(s) attached.")
            continue
        if stripped == "/drop":
            pending.clear()
            continue
        if stripped == "/clear":
            conversation.reset()
            write("Conversation cleared.")
            continue
        if stripped == "/models":
            try:
                write("\n".join(await conversation.chat.list_models()))
            except Exception as exc:  # noqa: BLE001 - listing is best effort.
                write(f"Unable to list models: {exc}")
            continue
        if stripped == "/settings":
            write(describe_settings(model_config))
            continue
        if stripped == "/model":
            write(_model_choices(model_config))
            continue
        command, _, argument = stripped.partition(" ")
        if command in {"/model", "/search", "/think", "/budget", "/temp"}:
            try:
                model_config = apply_setting(model_config, command, argument.strip())
            except ConfigurationError as exc:
                write(f"Setting not changed: {exc}")
            else:
                write(describe_settings(model_config))
            continue

        reply = await conversation.submit_turn(line, pending.take(), model_config)
        if reply is not None:
            write(f"gemini> {format_message(reply)}")


def main(argv: Sequence[str] | None = None) -> None:
    """Load configuration, handle CLI flags, and run the chat loop."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("gemini-nexus")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"gemini-nexus {version}")
        return

    ensure_config_dir()
    config = load_config(args.config)
    configure_logging(config["logging"])
    try:
        model_config = _session_config(args, config)
        chat = GeminiChat.from_config(config)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    pending = PendingAttachments(
        max_image_bytes=config["attachments"]["max_image_bytes"]
    )
    asyncio.run(run_repl(Conversation(chat), model_config, pending))


if __name__ == "__main__":
    main()
