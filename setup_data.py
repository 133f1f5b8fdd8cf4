import logging
import sys

import requests

from element_games import GameSettings, configure_logging, load_catalog

RAW_URL = "https://raw.githubusercontent.com/Bowserinator/Periodic-Table-JSON/master/PeriodicTableJSON.json"

logger = logging.getLogger("setup_data")


def download(out_file: str, url: str = RAW_URL) -> int:
    logger.info("Downloading %s", url)
    r = requests.get(url, timeout=30)
    r.raise_for_status()
    with open(out_file, "wb") as f:
        f.write(r.content)
    return len(r.content)


def main(argv=None):
    settings = GameSettings.from_env()
    configure_logging(settings)
    args = sys.argv[1:] if argv is None else argv
    out_file = args[0] if args else settings.data_path

    size = download(out_file)
    # Parse once so a broken download fails here, not in the app
    catalog = load_catalog(out_file)
    print(f"Saved {out_file} ({size:,} bytes, {len(catalog)} elements)")


if __name__ == "__main__":
    main()
