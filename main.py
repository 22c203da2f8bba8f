from __future__ import annotations

import argparse
from contextlib import contextmanager
import importlib.util
import logging
import os
from pathlib import Path
from typing import Any, Iterator, Sequence

from tessera_core.core import Canvas, Color, TesseraConfig, load_config
from tessera_core.core.config import POINTS_PER_UNIT_ENV_VAR
from tessera_core.targets import (
    ObjRenderer,
    ObjSettings,
    RasterRenderer,
    RasterSettings,
    SvgRenderer,
    SvgSettings,
    WindowRenderer,
    WindowSettings,
    get_display_runtime,
)

LOGGER = logging.getLogger("tessera")

EXAMPLES_DIR = Path(__file__).resolve().parent / "examples"
FORMATS = ("svg", "png", "jpg", "obj", "window")


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="tessera")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render an example scene (examples/<name>.py exposing build_canvas()).")
    render.add_argument("example", help="Example name or path to a .py file.")
    render.add_argument("--format", choices=FORMATS, default="svg")
    render.add_argument("--output", type=Path, default=None, help="Output file. Default: <example>.<format>.")
    render.add_argument("--size", type=int, nargs=2, metavar=("WIDTH", "HEIGHT"), default=None)
    render.add_argument("--background", default=None, help="Background colour as hex, e.g. #FFFFFF.")
    render.add_argument("--preserve-height", action="store_true")
    render.add_argument("--no-antialias", action="store_true", help="Raster formats only.")
    render.add_argument("--config", type=Path, default=None, help="TOML file with renderer settings.")
    render.add_argument("--examples-dir", type=Path, default=EXAMPLES_DIR)

    listing = sub.add_parser("list-examples", help="List the example scenes.")
    listing.add_argument("--examples-dir", type=Path, default=EXAMPLES_DIR)

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "list-examples":
        for name in list_examples(args.examples_dir):
            print(name)
        return 0

    if args.command == "render":
        if args.config is not None:
            config = load_config(args.config)
            points_per_unit = config.canvas.points_per_unit
        else:
            config = TesseraConfig()
            points_per_unit = None
        canvas = load_example(args.example, args.examples_dir, points_per_unit)
        overrides: dict[str, Any] = {}
        if args.size is not None:
            overrides["size"] = tuple(args.size)
        if args.background is not None:
            overrides["background"] = Color.from_hex(args.background)
        if args.preserve_height:
            overrides["preserve_height"] = True
        if args.no_antialias:
            overrides["antialias"] = False
        output = args.output
        if output is None and args.format != "window":
            output = Path(f"{Path(args.example).stem}.{args.format}")
        written = render_canvas(canvas, args.format, output, config, overrides)
        for path in written:
            print(f"wrote {path}")
        return 0

    raise RuntimeError(f"unsupported command: {args.command}")


def list_examples(examples_dir: Path = EXAMPLES_DIR) -> list[str]:
    return sorted(p.stem for p in examples_dir.glob("*.py") if not p.name.startswith("_"))


def load_example(name: str, examples_dir: Path = EXAMPLES_DIR, points_per_unit: int | None = None) -> Canvas:
    """Import an example module by file path and return its `build_canvas()` result.

    `points_per_unit` becomes the default for every `Canvas()` the example
    creates without an explicit value.
    """
    module_path = Path(name)
    if module_path.suffix != ".py":
        module_path = examples_dir / f"{name}.py"
    if not module_path.exists():
        raise ValueError(f"example not found: {name}")
    unique_name = f"tessera_example_{module_path.stem}_{abs(hash(str(module_path.resolve())))}"
    spec = importlib.util.spec_from_file_location(unique_name, module_path)
    if spec is None or spec.loader is None:
        raise ValueError(f"unable to load example module: {module_path}")
    module = importlib.util.module_from_spec(spec)
    with _points_per_unit_default(points_per_unit):
        spec.loader.exec_module(module)
        build = getattr(module, "build_canvas", None)
        if not callable(build):
            raise ValueError(f"example {module_path} does not define build_canvas()")
        canvas = build()
    if not isinstance(canvas, Canvas):
        raise ValueError(f"build_canvas() in {module_path} must return a Canvas")
    return canvas


def render_canvas(
    canvas: Canvas,
    fmt: str,
    output: Path | None,
    config: TesseraConfig,
    overrides: dict[str, Any] | None = None,
) -> list[Path]:
    """Render with the backend for `fmt` and return the files written."""
    overrides = dict(overrides or {})
    if fmt == "svg":
        overrides.pop("antialias", None)
        output = _require_output(output, fmt)
        svg = canvas.render(SvgRenderer(SvgSettings(**{**config.svg, **overrides})))
        output.write_text(svg, encoding="utf-8")
        return [output]
    if fmt in ("png", "jpg"):
        output = _require_output(output, fmt)
        image = canvas.render(RasterRenderer(RasterSettings(**{**config.raster, **overrides})))
        if fmt == "jpg":
            image = image.convert("RGB")
        image.save(output)
        return [output]
    if fmt == "obj":
        output = _require_output(output, fmt)
        obj_settings = dict(config.obj)
        obj_settings.setdefault("mtl_filename", output.with_suffix(".mtl").name)
        obj_text, mtl_text = canvas.render(ObjRenderer(ObjSettings(**obj_settings)))
        mtl_path = output.with_name(obj_settings["mtl_filename"])
        output.write_text(obj_text, encoding="utf-8")
        mtl_path.write_text(mtl_text, encoding="utf-8")
        return [output, mtl_path]
    if fmt == "window":
        overrides.pop("antialias", None)
        if "size" in overrides:
            overrides["window_size"] = overrides.pop("size")
        runtime = get_display_runtime()
        canvas.render(WindowRenderer(WindowSettings(**{**config.window, **overrides}), runtime=runtime))
        runtime.wait_closed()
        if runtime.last_error is not None:
            raise RuntimeError("display thread failed") from runtime.last_error
        return []
    raise ValueError(f"unsupported format: {fmt}")


def _require_output(output: Path | None, fmt: str) -> Path:
    if output is None:
        raise ValueError(f"output path required for {fmt}")
    return output


@contextmanager
def _points_per_unit_default(value: int | None) -> Iterator[None]:
    if value is None:
        yield
        return
    previous = os.environ.get(POINTS_PER_UNIT_ENV_VAR)
    os.environ[POINTS_PER_UNIT_ENV_VAR] = str(value)
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop(POINTS_PER_UNIT_ENV_VAR, None)
        else:
            os.environ[POINTS_PER_UNIT_ENV_VAR] = previous


if __name__ == "__main__":
    raise SystemExit(main())
