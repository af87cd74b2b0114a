"""Typer-based CLI entry point."""

from __future__ import annotations

import base64
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import MARQUEE_RECTANGLE, VIEW_WINDOW_DEFAULT_SIZE
from .errors import CanvasCropError, ConfigurationError
from .events import CropDataReady, CropFinished
from .geometry import scaled_dimensions, scaling_factor
from .session import CropData, CropRectangle, CropSession, PointerEvent
from .settings import CropOptions
from .tasks import SynchronousImageLoader

app = typer.Typer(help="Draw rectangle or ellipse crop marquees over images")
_console = Console(stderr=True)


def _parse_pair(value: str, separator: str, label: str) -> tuple[float, float]:
    parts = value.lower().split(separator)
    if len(parts) != 2:
        raise typer.BadParameter(f"{label} must look like A{separator}B, got {value!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise typer.BadParameter(f"{label} must be numeric, got {value!r}") from exc


def _rect_table(title: str, rect: CropRectangle | None) -> Table:
    table = Table(title=title)
    for column in ("x", "y", "w", "h"):
        table.add_column(column, justify="right")
    if rect is not None:
        table.add_row(*(f"{value:g}" for value in (rect.x, rect.y, rect.w, rect.h)))
    return table


def _ensure_gui_application():
    """Return a running ``QGuiApplication``, creating an offscreen one if needed."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication

    return QGuiApplication.instance() or QGuiApplication([])


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log gesture details"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=_console, show_path=False)],
    )


@app.command()
def fit(
    image_width: float = typer.Argument(..., help="Natural image width in pixels"),
    image_height: float = typer.Argument(..., help="Natural image height in pixels"),
    surface_width: float = typer.Argument(..., help="Drawing surface width"),
    surface_height: float = typer.Argument(..., help="Drawing surface height"),
) -> None:
    """Print the scaling factor and centered placement of an image."""
    factor = scaling_factor(image_width, image_height, surface_width, surface_height)
    dims = scaled_dimensions(image_width, image_height, surface_width, surface_height)
    table = Table(title=f"factor {factor:g}")
    for column in ("x", "y", "x2", "y2", "w", "h"):
        table.add_column(column, justify="right")
    table.add_row(*(f"{value:g}" for value in (dims.x, dims.y, dims.x2, dims.y2, dims.w, dims.h)))
    print(table)


@app.command()
def crop(
    image: Path = typer.Argument(..., help="Image to crop"),
    surface: str = typer.Option("800x600", help="Surface size as WIDTHxHEIGHT"),
    start: str = typer.Option(..., "--from", help="Gesture start on the surface as X,Y"),
    end: str = typer.Option(..., "--to", help="Gesture end on the surface as X,Y"),
    marquee: str = typer.Option(MARQUEE_RECTANGLE, help="rectangle or ellipse"),
    constrain: bool = typer.Option(False, "--constrain/--no-constrain", help="Force 1:1"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the cropped PNG"),
) -> None:
    """Replay a single drag gesture headlessly and report the crop."""
    surface_w, surface_h = _parse_pair(surface, "x", "surface")
    start_x, start_y = _parse_pair(start, ",", "--from")
    end_x, end_y = _parse_pair(end, ",", "--to")

    _ensure_gui_application()
    from PySide6.QtGui import QImage

    try:
        options = CropOptions.from_mapping(
            {
                "marqueeType": marquee,
                "constrainRatio": constrain,
                "rawDataOutput": output is not None,
            }
        )
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc

    finished: list[CropRectangle | None] = []
    payloads: list[CropData | None] = []
    session = CropSession(loader=SynchronousImageLoader())
    session.subscribe(CropFinished, lambda event: finished.append(event.coordinates))
    session.subscribe(CropDataReady, lambda event: payloads.append(event.raw_data))

    canvas = QImage(int(surface_w), int(surface_h), QImage.Format.Format_ARGB32_Premultiplied)
    session.start(canvas, str(image), options)
    if session.load_error is not None:
        typer.echo(f"Error: {session.load_error}", err=True)
        raise typer.Exit(1)

    session.handle_pointer_down(PointerEvent(start_x, start_y))
    session.handle_pointer_move(PointerEvent(end_x, end_y))
    session.handle_pointer_up(PointerEvent(end_x, end_y))

    rect = finished[-1] if finished else None
    print(_rect_table(f"{image.name} @ factor {session.scale():g}", rect))
    if rect is None:
        typer.echo("No marquee was drawn.", err=True)
        raise typer.Exit(1)

    if output is None:
        return
    payload = payloads[-1] if payloads else None
    if payload is None or payload.data is None:
        reason = payload.error if payload is not None else "no pixel data"
        typer.echo(f"Error: {reason}", err=True)
        raise typer.Exit(1)
    _, _, encoded = payload.data.partition(",")
    output.write_bytes(base64.b64decode(encoded))
    print(f"[green]Wrote[/green] {output} ({payload.w}x{payload.h})")


@app.command()
def view(
    image: Path = typer.Argument(..., help="Image to crop"),
    marquee: str = typer.Option(MARQUEE_RECTANGLE, help="rectangle or ellipse"),
    constrain: bool = typer.Option(True, "--constrain/--no-constrain", help="Force 1:1"),
    raw_data: bool = typer.Option(False, "--raw-data", help="Export pixels on release"),
) -> None:
    """Open an interactive crop window and print events as they happen."""
    from PySide6.QtWidgets import QApplication

    from .widgets import CropCanvas

    qt_app = QApplication.instance() or QApplication([])
    try:
        options = CropOptions.from_mapping(
            {"marqueeType": marquee, "constrainRatio": constrain, "rawDataOutput": raw_data}
        )
    except CanvasCropError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc

    canvas = CropCanvas()
    canvas.setWindowTitle(f"canvascrop - {image.name}")
    canvas.resize(*VIEW_WINDOW_DEFAULT_SIZE)
    canvas.cropFinished.connect(lambda rect: print("finish", rect.as_dict() if rect else None))
    canvas.cropData.connect(
        lambda data: print("data", {**data.as_dict(), "data": bool(data.data)} if data else None)
    )
    canvas.imageLoadFailed.connect(lambda message: typer.echo(f"Error: {message}", err=True))
    canvas.show()
    canvas.start(str(image), options)
    raise typer.Exit(qt_app.exec())


if __name__ == "__main__":
    app()
