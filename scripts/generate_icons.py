#!/usr/bin/env python3
"""
Generate the PWA icon set and favicon from a single source image.

Usage:
  python scripts/generate_icons.py [--source assets/icon-source.png] [--sample]

--sample draws a placeholder source icon first. Icons land in
<STATIC_DIR>/icons and the favicon in <STATIC_DIR>/favicon.ico.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from workinfo.core.config import PROJECT_ROOT, get_settings
from workinfo.core.pwa import ICON_SIZES

ASSETS_DIR = PROJECT_ROOT / "assets"
SOURCE_NAME = "icon-source.png"
SAMPLE_SIZE = 1024


def _font(size: int):
    try:
        return ImageFont.truetype("DejaVuSans-Bold.ttf", size)
    except OSError:
        return ImageFont.load_default(size)


def create_sample_icon(dest: Path) -> Path:
    """Draw a blue gradient tile with a W and the brand name."""
    image = Image.new("RGBA", (SAMPLE_SIZE, SAMPLE_SIZE), (0, 0, 0, 0))
    gradient = Image.new("RGBA", (SAMPLE_SIZE, SAMPLE_SIZE))
    start, end = (0x3B, 0x82, 0xF6), (0x1D, 0x4E, 0xD8)
    pixels = gradient.load()
    for y in range(SAMPLE_SIZE):
        for x in range(SAMPLE_SIZE):
            t = (x + y) / (2 * (SAMPLE_SIZE - 1))
            pixels[x, y] = tuple(int(a + (b - a) * t) for a, b in zip(start, end)) + (255,)
    mask = Image.new("L", (SAMPLE_SIZE, SAMPLE_SIZE), 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, SAMPLE_SIZE - 1, SAMPLE_SIZE - 1), radius=150, fill=255)
    image.paste(gradient, (0, 0), mask)

    draw = ImageDraw.Draw(image)
    draw.text((512, 450), "W", font=_font(300), fill="white", anchor="mm")
    draw.rounded_rectangle((200, 700, 824, 780), radius=40, fill=(255, 255, 255, 230))
    draw.text((512, 740), "WorkInfo", font=_font(48), fill=(0x1D, 0x4E, 0xD8), anchor="mm")

    dest.parent.mkdir(parents=True, exist_ok=True)
    image.save(dest, format="PNG")
    print(f"Created sample icon at {dest}")
    return dest


def _fit(source: Image.Image, size: int) -> Image.Image:
    """Resize keeping aspect ratio, centred on a transparent square."""
    icon = source.copy()
    icon.thumbnail((size, size), Image.LANCZOS)
    canvas = Image.new("RGBA", (size, size), (255, 255, 255, 0))
    canvas.paste(icon, ((size - icon.width) // 2, (size - icon.height) // 2), icon)
    return canvas


def generate_icons(source_path: Path, static_dir: Path) -> int:
    """Write every icon in ICON_SIZES plus favicon.ico; returns how many icons succeeded."""
    output_dir = static_dir / "icons"
    output_dir.mkdir(parents=True, exist_ok=True)
    with Image.open(source_path) as opened:
        source = opened.convert("RGBA")
    if not source.width or not source.height:
        raise ValueError("Invalid source image - could not read dimensions")
    print(f"Source: {source_path} ({source.width}x{source.height})")

    ok = 0
    for size, name in ICON_SIZES:
        try:
            _fit(source, size).save(output_dir / name, format="PNG", optimize=True)
        except OSError as exc:
            print(f"Failed to generate {name}: {exc}", file=sys.stderr)
            continue
        ok += 1
        print(f"Generated {name} ({size}x{size})")

    _fit(source, 32).save(static_dir / "favicon.ico", format="ICO", sizes=[(16, 16), (32, 32)])
    print("Generated favicon.ico")
    print(f"Generated {ok}/{len(ICON_SIZES)} icons")
    return ok


def main() -> None:
    ap = argparse.ArgumentParser(description="Generate PWA icons")
    ap.add_argument("--source", help=f"Source image (default: assets/{SOURCE_NAME})")
    ap.add_argument("--sample", action="store_true", help="Draw a sample source icon first")
    ap.add_argument("--static-dir", help="Output directory (default: STATIC_DIR setting)")
    args = ap.parse_args()

    source = Path(args.source) if args.source else ASSETS_DIR / SOURCE_NAME
    if args.sample:
        source = create_sample_icon(source)
    if not source.exists():
        raise SystemExit(f"No source icon found at {source}; pass --source or --sample")
    static_dir = Path(args.static_dir or get_settings().static_dir)
    if generate_icons(source, static_dir) != len(ICON_SIZES):
        raise SystemExit(1)


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
