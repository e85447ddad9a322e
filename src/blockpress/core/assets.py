"""Publishing of a page's stylesheet and asset directory"""

import logging
import re
import shutil
from pathlib import Path


logger = logging.getLogger(__name__)

STYLESHEET = 'styles.css'
ASSETS_DIR = 'assets'
ASSET_REF_RE = re.compile(r'(?<![\w/.])(?:\./)?assets/')


def rewrite_css(css: str, slug: str) -> str:
    """Point every relative assets/ reference at /assets/<slug>/."""
    return ASSET_REF_RE.sub(f'/assets/{slug}/', css)


def publish_assets(import_dir: Path, slug: str, public_dir: Path) -> list[Path]:
    """Copy styles.css to css/<slug>.css and assets/ to assets/<slug>/ under public_dir.

    Missing sources are skipped. Copy failures are logged and skipped too;
    they never abort the import. Returns the destinations written.
    """
    written: list[Path] = []

    css_src = import_dir / STYLESHEET
    if css_src.is_file():
        css_dest = public_dir / 'css' / f'{slug}.css'
        try:
            css_dest.parent.mkdir(parents=True, exist_ok=True)
            css_dest.write_text(rewrite_css(css_src.read_text(encoding='utf-8'), slug), encoding='utf-8')
            written.append(css_dest)
        except OSError as e:
            logger.error("Could not publish %s for %s: %s", css_src, slug, e)
    else:
        logger.debug("No %s in %s", STYLESHEET, import_dir)

    assets_src = import_dir / ASSETS_DIR
    if assets_src.is_dir():
        assets_dest = public_dir / ASSETS_DIR / slug
        try:
            shutil.copytree(assets_src, assets_dest, dirs_exist_ok=True)
            written.append(assets_dest)
        except OSError as e:
            logger.error("Could not copy %s for %s: %s", assets_src, slug, e)
    else:
        logger.warning("No %s/ directory in %s; skipping asset copy", ASSETS_DIR, import_dir)

    return written
