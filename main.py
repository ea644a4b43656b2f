"""
GenBridge - Main Entry Point

CLI for inspecting the provider registry, validating configurations, and
sending generate / stream / count-tokens / embed requests through the
same ContentGenerator interface the library exposes.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import typer
from dotenv import load_dotenv
from google.genai import types
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from genbridge.config.loader import load_profile
from genbridge.config.settings import AuthType, resolve_content_generator_settings
from genbridge.exceptions import GenBridgeError
from genbridge.llm.contract import ContentGenerator
from genbridge.llm.factory import AdapterFactory, user_agent
from genbridge.llm.validation import AdapterConfig
from genbridge.observability.logging_config import configure_logging, set_request_id

app = typer.Typer(
    name="genbridge",
    help="GenBridge - one content-generation interface over multiple LLM providers",
)
console = Console()
logger = logging.getLogger("genbridge")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Load .env, configure logging and tag this invocation with a request id."""
    load_dotenv(override=False)
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)
    set_request_id(uuid.uuid4().hex[:12])


# =========================================================================
# Helpers
# =========================================================================


@dataclass
class _Target:
    generator: ContentGenerator
    model: str
    embedding_model: str


def _fail(title: str, message: str) -> NoReturn:
    console.print(Panel(
        f"[red]{message}[/]",
        title=f"⚠ {title}",
        border_style="red",
    ))
    raise typer.Exit(code=1)


def _build_target(
    profile: Optional[Path],
    auth_type: Optional[AuthType],
    model: Optional[str],
) -> _Target:
    """Resolve config from a profile or the environment and build a generator."""
    try:
        if profile is not None:
            loaded = load_profile(profile)
            config = loaded.to_adapter_config()
            if model:
                config.model = model
        else:
            settings = resolve_content_generator_settings(model, auth_type)
            config = settings.to_adapter_config()

        resolved = AdapterFactory.resolve(config)
        generator = AdapterFactory.create_adapter(
            config,
            default_headers={"User-Agent": user_agent()},
        )
    except GenBridgeError as e:
        _fail("Configuration Error", str(e))

    return _Target(generator, resolved.model, resolved.embedding_model)


_PROFILE_OPTION = typer.Option(None, "--profile", help="YAML provider profile")
_AUTH_OPTION = typer.Option(
    None, "--auth-type", envvar="GENBRIDGE_AUTH_TYPE",
    help="Auth type when no profile is given",
)
_MODEL_OPTION = typer.Option(None, "--model", help="Override the model")


# =========================================================================
# Commands
# =========================================================================


@app.command()
def providers():
    """Show supported providers, their models and embedding defaults."""
    table = Table(title="GenBridge - Supported Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Models", style="white")
    table.add_column("Default Embedding", style="green")

    registry = AdapterFactory.registry
    for provider in registry.all_providers():
        table.add_row(
            provider.value,
            ", ".join(registry.supported_models(provider)),
            registry.default_embedding_model(provider),
        )

    console.print(table)


@app.command()
def validate(
    provider: str = typer.Option("", help="Provider id (e.g. 'openai')"),
    model: str = typer.Option("", help="Model name"),
    api_key: str = typer.Option("", help="API key to check for presence"),
):
    """Validate a provider/model/key combination."""
    result = AdapterFactory.validate_config(
        AdapterConfig(provider=provider or None, api_key=api_key, model=model)
    )

    if result.valid:
        supported = AdapterFactory.is_model_supported(provider, model)
        console.print(Panel(
            f"[green]Configuration valid![/]\n\n"
            f"Provider: {provider}\n"
            f"Model: {model}"
            + ("" if supported else "\n[yellow]Model is not in the registry; it may still work.[/]"),
            title="Config",
        ))
        return

    console.print(Panel(
        "\n".join(f"[red]•[/] {error}" for error in result.errors),
        title="⚠ Configuration Invalid",
        border_style="red",
    ))
    raise typer.Exit(code=1)


@app.command()
def infer(model: str = typer.Argument(..., help="Model name")):
    """Infer the provider that lists a model."""
    provider = AdapterFactory.infer_provider_from_model(model)
    if provider is None:
        console.print(f"[yellow]{model}[/]: none found")
        raise typer.Exit(code=1)
    console.print(f"[cyan]{model}[/] → [bold]{provider.value}[/]")


@app.command()
def generate(
    prompt: str = typer.Argument(..., help="User prompt"),
    system: Optional[str] = typer.Option(None, help="System instruction"),
    stream: bool = typer.Option(False, "--stream", help="Print chunks as they arrive"),
    profile: Optional[Path] = _PROFILE_OPTION,
    auth_type: Optional[AuthType] = _AUTH_OPTION,
    model: Optional[str] = _MODEL_OPTION,
):
    """Send one prompt and print the response."""
    target = _build_target(profile, auth_type, model)
    config = types.GenerateContentConfig(system_instruction=system) if system else None
    contents = [types.Content(role="user", parts=[types.Part(text=prompt)])]

    async def _run():
        if not stream:
            response = await target.generator.generate_content(
                model=target.model, contents=contents, config=config,
            )
            console.print(response.text or "", markup=False)
            return response

        last = None
        response_stream = await target.generator.generate_content_stream(
            model=target.model, contents=contents, config=config,
        )
        try:
            async for chunk in response_stream:
                last = chunk
                console.print(chunk.text or "", end="", markup=False)
        finally:
            aclose = getattr(response_stream, "aclose", None)
            if aclose is not None:
                await aclose()
        console.print()
        return last

    try:
        response = asyncio.run(_run())
    except GenBridgeError as e:
        _fail("Request Failed", str(e))

    if response is not None and response.candidates:
        finish_reason = response.candidates[0].finish_reason
        usage = response.usage_metadata
        summary = f"finish_reason={finish_reason.value if finish_reason else '-'}"
        if usage is not None:
            summary += (
                f" prompt_tokens={usage.prompt_token_count}"
                f" candidates_tokens={usage.candidates_token_count}"
                f" total_tokens={usage.total_token_count}"
            )
        console.print(f"[dim]{summary}[/]")


@app.command(name="count-tokens")
def count_tokens(
    text: str = typer.Argument(..., help="Text to count"),
    profile: Optional[Path] = _PROFILE_OPTION,
    auth_type: Optional[AuthType] = _AUTH_OPTION,
    model: Optional[str] = _MODEL_OPTION,
):
    """Count (or, for OpenAI, estimate) the tokens in a text."""
    target = _build_target(profile, auth_type, model)
    contents = [types.Content(role="user", parts=[types.Part(text=text)])]

    try:
        response = asyncio.run(
            target.generator.count_tokens(model=target.model, contents=contents)
        )
    except GenBridgeError as e:
        _fail("Request Failed", str(e))

    console.print(f"total_tokens={response.total_tokens}")


@app.command()
def embed(
    text: str = typer.Argument(..., help="Text to embed"),
    profile: Optional[Path] = _PROFILE_OPTION,
    auth_type: Optional[AuthType] = _AUTH_OPTION,
    model: Optional[str] = _MODEL_OPTION,
):
    """Embed a text and print the vector's size and head."""
    target = _build_target(profile, auth_type, model)
    contents = [types.Content(role="user", parts=[types.Part(text=text)])]

    try:
        response = asyncio.run(
            target.generator.embed_content(model=target.embedding_model, contents=contents)
        )
    except GenBridgeError as e:
        _fail("Request Failed", str(e))

    values = (response.embeddings[0].values or []) if response.embeddings else []
    head = ", ".join(f"{v:.4f}" for v in values[:5])
    console.print(f"dimensions={len(values)} [{head}{', ...' if len(values) > 5 else ''}]")


if __name__ == "__main__":
    app()
