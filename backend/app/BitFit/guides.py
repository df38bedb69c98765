import os
from typing import Any, Dict, Optional

import requests

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
GUIDES_DIR = os.path.join(BASE_DIR, "data", "guides")

# slug -> bundled text file, download name and the config key of its remote URL
GUIDES: Dict[str, Dict[str, str]] = {
    "weight-loss": {
        "title": "Weight Loss Guide",
        "source": "weight_loss.txt",
        "file_name": "Weight-Loss-Guide-BitFit-Pro.txt",
        "url_key": "weightLoss",
    },
    "muscle-build": {
        "title": "Muscle Building Guide",
        "source": "muscle_build.txt",
        "file_name": "Muscle-Building-Guide-BitFit-Pro.txt",
        "url_key": "muscleBuild",
    },
    "stress-relief": {
        "title": "Stress Relief Program",
        "source": "stress_relief.txt",
        "file_name": "Stress-Relief-Program-FitCoach-Pro.txt",
        "url_key": "stressRelief",
    },
    "exercises-anywhere": {
        "title": "Exercises Anywhere Guide",
        "source": "exercises_anywhere.txt",
        "file_name": "Exercises-Anywhere-Guide-BitFit-Pro.txt",
        "url_key": "exercisesAnywhere",
    },
}


class GuideNotFoundError(LookupError):
    """Raised when a guide slug is not one of GUIDES."""


def get_guide(slug: str) -> Dict[str, str]:
    guide = GUIDES.get((slug or "").lower())
    if guide is None:
        raise GuideNotFoundError(f"Unknown guide '{slug}'. Allowed: {', '.join(sorted(GUIDES))}")
    return guide


def list_guides(download_urls: Optional[Dict[str, str]] = None) -> list:
    download_urls = download_urls or {}
    return [
        {
            "slug": slug,
            "title": guide["title"],
            "file_name": guide["file_name"],
            "remote": bool((download_urls.get(guide["url_key"]) or "").strip()),
        }
        for slug, guide in GUIDES.items()
    ]


def load_bundled_guide(slug: str) -> bytes:
    guide = get_guide(slug)
    with open(os.path.join(GUIDES_DIR, guide["source"]), "rb") as handle:
        return handle.read()


CHUNK_SIZE = 64 * 1024


def fetch_remote_guide(url: str, timeout: float) -> Dict[str, Any]:
    """
    Open a guide at its configured URL; the body is streamed in chunks, not buffered.

    Raises:
      requests.RequestException: network failures, timeouts and non-2xx responses
    """
    r = requests.get(url, timeout=timeout, stream=True)
    try:
        r.raise_for_status()
    except requests.HTTPError:
        r.close()
        raise
    return {
        "content": r.iter_content(chunk_size=CHUNK_SIZE),
        "content_type": r.headers.get("Content-Type", "application/octet-stream"),
    }
