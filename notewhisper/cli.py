"""Command line interface for notewhisper."""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterator, Optional

import typer

from . import __version__
from . import config as config_mod
from .config import ConfigError
from .models import Settings
from .plugin import NoteWhisperPlugin, PluginContext
from .vault import Vault

app = typer.Typer(add_completion=False, help="Transcribe audio embedded in Markdown notes.")


class TyperNotifier:
    """Print notices to the terminal."""

    def notify(self, message: str) -> None:
        typer.secho(message, fg=typer.colors.BLUE)


def _load_settings() -> Settings:
    try:
        return config_mod.load_config()
    except ConfigError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug_mode else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _open_vault(vault: Optional[Path], settings: Settings) -> Vault:
    root = vault or (Path(settings.vault_path) if settings.vault_path else None)
    if root is None:
        typer.secho(
            "No vault configured. Pass --vault or run `notewhisper config --vault-path ...` first.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)
    if not root.expanduser().is_dir():
        typer.secho(f"Vault folder does not exist: {root}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return Vault(root)


def _note_path(vault: Vault, note: Path) -> str:
    candidate = note if note.is_absolute() else Path.cwd() / note
    if candidate.exists():
        try:
            return vault.relative(candidate)
        except ValueError as exc:
            typer.secho(f"{note} is not inside the vault {vault.root}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
    return note.as_posix()


@contextmanager
def _running_plugin(vault: Optional[Path]) -> Iterator[NoteWhisperPlugin]:
    settings = _load_settings()
    _configure_logging(settings)
    plugin = NoteWhisperPlugin()
    plugin.start(PluginContext(settings=settings, vault=_open_vault(vault, settings), notifier=TyperNotifier()))
    try:
        yield plugin
    finally:
        plugin.stop()


VaultOption = typer.Option(None, "--vault", help="Vault folder (defaults to the configured vault_path).")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
) -> None:
    if version:
        typer.echo(f"notewhisper v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command()
def scan(
    note: Path = typer.Argument(..., help="Note to scan, absolute or relative to the vault."),
    vault: Optional[Path] = VaultOption,
) -> None:
    """Transcribe the audio embedded in one note."""

    with _running_plugin(vault) as plugin:
        note_path = _note_path(plugin.context.vault, note)
        if not plugin.context.vault.exists(note_path):
            typer.secho(f"Note not found: {note}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        report = plugin.scan_active_document(note_path)
    if report is not None and report.skipped:
        raise typer.Exit(code=1)


@app.command("scan-all")
def scan_all(
    folder: Optional[str] = typer.Option(None, "--folder", help="Vault folder to scan instead of scan_folder."),
    vault: Optional[Path] = VaultOption,
) -> None:
    """Transcribe the audio embedded in every note under the scan folder."""

    with _running_plugin(vault) as plugin:
        if folder is not None:
            plugin.context.settings.scan_folder = folder
        summary = plugin.scan_all()
    if summary is None or summary.skipped:
        raise typer.Exit(code=1)


@app.command()
def watch(vault: Optional[Path] = VaultOption) -> None:  # pragma: no cover - long running
    """Watch the vault and transcribe new audio embeds as notes change."""

    with _running_plugin(vault) as plugin:
        plugin.start_watching()
        typer.secho("Watching for changes. Press Ctrl+C to stop.", fg=typer.colors.BLUE)
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            typer.echo("Stopping.")


@app.command()
def upload(
    audio: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Audio file to transcribe."),
    note: Optional[Path] = typer.Option(None, "--note", help="Append the transcript to this note."),
    vault: Optional[Path] = VaultOption,
) -> None:
    """Transcribe a local audio file."""

    with _running_plugin(vault) as plugin:
        active = _note_path(plugin.context.vault, note) if note else None
        text = plugin.upload_audio_file(audio, active)
    if text is None:
        raise typer.Exit(code=1)
    typer.echo(text)


@app.command()
def record(
    note: Optional[Path] = typer.Option(None, "--note", help="Append the transcript to this note."),
    vault: Optional[Path] = VaultOption,
) -> None:  # pragma: no cover - interactive
    """Record from the microphone until Enter is pressed, then transcribe."""

    with _running_plugin(vault) as plugin:
        active = _note_path(plugin.context.vault, note) if note else None
        try:
            plugin.toggle_recording()
        except RuntimeError as exc:
            typer.secho(str(exc), fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
        typer.prompt("Recording… press Enter to stop", default="", show_default=False)
        text = plugin.toggle_recording(active)
    if text is None:
        raise typer.Exit(code=1)
    typer.echo(text)


@app.command()
def config(
    api_key: Optional[str] = typer.Option(None, help="API key for transcription and analysis."),
    model: Optional[str] = typer.Option(None, help="Transcription model."),
    language: Optional[str] = typer.Option(None, help="Transcription language code."),
    prompt: Optional[str] = typer.Option(None, help="Prompt passed to the transcription model."),
    api_url: Optional[str] = typer.Option(None, help="Transcription endpoint URL."),
    auth_header: Optional[str] = typer.Option(None, help="Authorization header value for a gateway endpoint."),
    analysis_url: Optional[str] = typer.Option(None, help="Chat completion endpoint URL."),
    analysis_model: Optional[str] = typer.Option(None, help="Chat model used for analysis."),
    analyze: Optional[bool] = typer.Option(None, "--analyze/--no-analyze", help="Toggle transcript analysis."),
    vault_path: Optional[str] = typer.Option(None, help="Default vault folder."),
    attachments_folder: Optional[str] = typer.Option(None, help="Fallback folder for audio files."),
    scan_folder: Optional[str] = typer.Option(None, help="Vault folder covered by batch scans."),
    debounce_seconds: Optional[float] = typer.Option(None, help="Quiet period before a watched change triggers a scan."),
    scan_on_startup: Optional[bool] = typer.Option(
        None, "--scan-on-startup/--no-scan-on-startup", help="Scan once when watching starts."
    ),
    transcode: Optional[bool] = typer.Option(None, "--transcode/--no-transcode", help="Re-encode audio with ffmpeg."),
    ffmpeg_path: Optional[str] = typer.Option(None, help="Path to the ffmpeg binary."),
    save_audio_file: Optional[bool] = typer.Option(
        None, "--save-audio/--no-save-audio", help="Keep recorded and uploaded audio in the vault."
    ),
    save_audio_file_path: Optional[str] = typer.Option(None, help="Vault folder for kept audio."),
    create_new_file: Optional[bool] = typer.Option(
        None, "--new-note/--no-new-note", help="Put each recording transcript in a new note."
    ),
    create_new_file_path: Optional[str] = typer.Option(None, help="Vault folder for new transcript notes."),
    api_timeout: Optional[float] = typer.Option(None, help="HTTP timeout in seconds."),
    verify_ssl: Optional[bool] = typer.Option(None, "--verify-ssl/--no-verify-ssl", help="Toggle TLS verification."),
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="Toggle verbose logging."),
    show: bool = typer.Option(False, "--show", help="Display the active configuration."),
) -> None:
    """Update or inspect configuration settings."""

    updates: Dict[str, object] = {
        key: value
        for key, value in {
            "api_key": api_key,
            "model": model,
            "language": language,
            "prompt": prompt,
            "api_url": api_url,
            "auth_header": auth_header,
            "analysis_url": analysis_url,
            "analysis_model": analysis_model,
            "analyze_transcripts": analyze,
            "vault_path": vault_path,
            "attachments_folder": attachments_folder,
            "scan_folder": scan_folder,
            "debounce_seconds": debounce_seconds,
            "scan_on_startup": scan_on_startup,
            "transcode_audio": transcode,
            "ffmpeg_path": ffmpeg_path,
            "save_audio_file": save_audio_file,
            "save_audio_file_path": save_audio_file_path,
            "create_new_file_after_recording": create_new_file,
            "create_new_file_after_recording_path": create_new_file_path,
            "api_timeout": api_timeout,
            "verify_ssl": verify_ssl,
            "debug_mode": debug,
        }.items()
        if value is not None
    }

    if show or not updates:
        cfg = _load_settings()
        data = asdict(cfg)
        if data.get("api_key"):
            data["api_key"] = data["api_key"][:3] + "…"
        typer.echo(json.dumps(data, indent=2, default=str))
        return

    try:
        config_mod.update_config(**updates)
    except ConfigError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.secho("Configuration updated.", fg=typer.colors.BLUE)


if __name__ == "__main__":  # pragma: no cover
    app()
