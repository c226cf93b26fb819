# scripts/extract_folder.py

from __future__ import annotations

import logging
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import Settings
from services.color_format import hex_code
from services.image_utils import ImageDecodeError, bytes_to_buffer
from services.palette_extractor import PaletteExtractor
from services.palette_repository import PaletteRepository
from domain.dtos import Palette

SUPPORTED_EXTS = (".jpg", ".jpeg", ".png", ".bmp", ".webp")

log = logging.getLogger("extract_folder")


def extract_folder(base: Path, settings: Settings, chat_id: int = 0) -> int:
    """Extract one palette per image in `base` (top zone, default size) and save it under `chat_id`."""
    repo = PaletteRepository(settings.db_url)
    extractor = PaletteExtractor(stride=settings.sampling_stride)

    count = 0
    if not base.is_dir():
        log.warning("%s is not a directory", base)
        return count

    for file in sorted(base.iterdir()):
        if not file.is_file() or file.suffix.lower() not in SUPPORTED_EXTS:
            continue
        try:
            buffer = bytes_to_buffer(file.read_bytes())
        except ImageDecodeError:
            log.warning("Skipping unreadable image %s", file)
            continue
        colors = extractor.extract(buffer, settings.default_color_count, 0)
        if not colors:
            log.warning("Skipping %s: too small to sample", file)
            continue
        repo.add(chat_id, Palette.create(colors))
        log.info("%s: %s", file.name, " ".join(hex_code(c) for c in colors))
        count += 1

    return count


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    folder = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("data/images")
    chat_id = int(sys.argv[2]) if len(sys.argv) > 2 else 0
    n = extract_folder(folder, Settings(), chat_id)
    print(f"Saved {n} palettes.")
