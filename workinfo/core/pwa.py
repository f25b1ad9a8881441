"""Web app manifest data and the icon set it references."""
from __future__ import annotations

APP_NAME = "WorkInfo - Professional Contact Cards"
APP_SHORT_NAME = "WorkInfo"
APP_DESCRIPTION = "Create and share professional digital business cards with ease"
THEME_COLOR = "#3B82F6"
BACKGROUND_COLOR = "#ffffff"
ICONS_URL_PREFIX = "/static/icons"

# (size, file name) for every generated icon.
ICON_SIZES: tuple[tuple[int, str], ...] = (
    (16, "icon-16x16.png"),
    (32, "icon-32x32.png"),
    (72, "icon-72x72.png"),
    (96, "icon-96x96.png"),
    (128, "icon-128x128.png"),
    (144, "icon-144x144.png"),
    (152, "icon-152x152.png"),
    (180, "icon-180x180.png"),
    (192, "icon-192x192.png"),
    (384, "icon-384x384.png"),
    (512, "icon-512x512.png"),
    (57, "apple-touch-icon-57x57.png"),
    (60, "apple-touch-icon-60x60.png"),
    (72, "apple-touch-icon-72x72.png"),
    (76, "apple-touch-icon-76x76.png"),
    (114, "apple-touch-icon-114x114.png"),
    (120, "apple-touch-icon-120x120.png"),
    (144, "apple-touch-icon-144x144.png"),
    (152, "apple-touch-icon-152x152.png"),
    (180, "apple-touch-icon-180x180.png"),
    (192, "shortcut-create.png"),
    (192, "shortcut-view.png"),
)

MANIFEST_ICON_SIZES = (72, 96, 128, 144, 152, 180, 192, 384, 512)


def _shortcut(name: str, short_name: str, description: str, icon: str) -> dict:
    return {
        "name": name,
        "short_name": short_name,
        "description": description,
        "url": "/dashboard",
        "icons": [{"src": f"{ICONS_URL_PREFIX}/{icon}", "sizes": "192x192"}],
    }


def build_manifest() -> dict:
    icons = [
        {"src": f"{ICONS_URL_PREFIX}/icon-{size}x{size}.png", "sizes": f"{size}x{size}", "type": "image/png"}
        for size in MANIFEST_ICON_SIZES
    ]
    icons.append(
        {"src": f"{ICONS_URL_PREFIX}/icon-512x512.png", "sizes": "512x512", "type": "image/png", "purpose": "any maskable"}
    )
    return {
        "name": APP_NAME,
        "short_name": APP_SHORT_NAME,
        "description": APP_DESCRIPTION,
        "theme_color": THEME_COLOR,
        "background_color": BACKGROUND_COLOR,
        "display": "standalone",
        "orientation": "portrait",
        "scope": "/",
        "start_url": "/?pwa=true",
        "id": "/?pwa=true",
        "icons": icons,
        "shortcuts": [
            _shortcut("Create Card", "Create", "Create a new business card", "shortcut-create.png"),
            _shortcut("View Cards", "Cards", "View your business cards", "shortcut-view.png"),
        ],
        "categories": ["business", "productivity", "utilities"],
    }
